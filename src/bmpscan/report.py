from typing import List, TextIO

from bmpscan.recognizer import DecodeResult


def format_payload(payload: bytes) -> str:
    return payload.decode('utf-8', errors='replace')


def write_report(results: List[DecodeResult], stream: TextIO):
    if not results:
        print('No QR codes found in the image.', file=stream)
        return

    print(f'Found {len(results)} QR code(s) in the image:', file=stream)
    for index, result in enumerate(results, 1):
        if result.ok:
            print(f'  QR Code #{index}: Payload: "{format_payload(result.payload)}"', file=stream)
        else:
            print(f'  QR Code #{index}: Decode failed: {result.error}', file=stream)

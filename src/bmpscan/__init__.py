from bmpscan.bitmap import BitmapError, LuminanceImage, load
from bmpscan.recognizer import DecodeResult, Recognizer, RecognizerError

__version__ = '0.1.0'

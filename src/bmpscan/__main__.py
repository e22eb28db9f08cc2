from bmpscan.cli import sync_main

sync_main()

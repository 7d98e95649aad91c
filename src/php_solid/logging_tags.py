# php_solid/logging_tags.py
"""
Subsystem tags prefixed to log messages so output stays searchable.
"""

PARSE = "[PARSE]"
INDEX = "[INDEX]"
SCAN = "[SCAN]"
THROWS = "[THROWS]"
RESOLVE = "[RESOLVE]"
LSP = "[LSP]"
ISP = "[ISP]"
CONFIG = "[CONFIG]"
CLI = "[CLI]"

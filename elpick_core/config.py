#!/usr/bin/env python3
from dataclasses import dataclass
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Config:
    """Application configuration"""
    highlight_class: str = os.getenv("ELPICK_HIGHLIGHT_CLASS", "element-highlight")
    chrome_marker: str = os.getenv("ELPICK_CHROME_MARKER", "data-devtoolkit")
    default_cursor: str = os.getenv("ELPICK_CURSOR", "crosshair")
    highlight_enabled: bool = os.getenv("ELPICK_HIGHLIGHT", "true").lower() in ["true", "1", "yes"]
    text_rule_max_length: int = int(os.getenv("ELPICK_TEXT_MAX_LEN", "50"))
    html_parser: str = os.getenv("ELPICK_HTML_PARSER", "html.parser")

    # Preferences persistence
    prefs_path: Path = Path(os.getenv("ELPICK_PREFS_PATH", "~/.config/elpick/prefs.json")).expanduser()
    prefs_storage_key: str = os.getenv("ELPICK_PREFS_KEY", "elpick-prefs-v1")

    api_port: int = int(os.getenv("ELPICK_API_PORT", "8010"))
    enable_debug: bool = os.getenv("ELPICK_DEBUG", "false").lower() == "true"

config = Config()

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.7",
}

# nested config tables flattened into the top level
CONFIG_GROUPS = ("http", "output", "auth", "general")


@dataclass
class Settings:
    timeout: float = 15.0
    retries: int = 3

    # HTTP 429 handling
    rate_limit_delay: float = 1.0
    max_rate_limit_retries: Optional[int] = None  # None: retry until not rate limited

    # Parsing / output
    parser: str = "lxml"
    safe_filenames: bool = False

    # Auth / session
    user_agent: Optional[str] = None
    extra_headers: List[str] = field(default_factory=list)  # "Name: value"
    cookies_file: Optional[str] = None
    auth_basic: Optional[str] = None  # "user:pass"
    auth_bearer: Optional[str] = None


def load_config_file(path: str) -> Dict[str, Union[str, int, float, bool, List[str]]]:
    p = Path(path)
    suf = p.suffix.lower()
    if suf in {".toml", ".tml"}:
        try:
            import tomllib  # py311+
        except ImportError:
            try:
                import tomli as tomllib  # backport
            except ImportError:
                raise RuntimeError("TOML config requires Python 3.11+ or 'tomli'")
        with open(p, "rb") as f:
            data = tomllib.load(f) or {}
    elif suf in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError:
            raise RuntimeError("YAML config requires 'PyYAML'")
        with open(p, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise RuntimeError("Top-level YAML must be a mapping")
    else:
        raise RuntimeError("Unsupported config format. Use .toml or .yaml")
    return flatten_config(data)


def flatten_config(cfg: Dict) -> Dict:
    flat = {k: v for k, v in cfg.items() if k not in CONFIG_GROUPS}
    for g in CONFIG_GROUPS:
        if isinstance(cfg.get(g), dict):
            flat.update(cfg[g])
    # config keys use dashes like the flags do
    return {k.replace("-", "_"): v for k, v in flat.items()}

import configparser
from pathlib import Path
from typing import Optional

from .errors import ConfigError
from .logger import setup_logger

_logger = setup_logger()

DEFAULT_GIT_URL = "https://github.com/commercialhaskell/all-cabal-hashes.git"
DEFAULT_HTTP_URL = "https://s3.amazonaws.com/hackage.fpcomplete.com/00-index.tar.gz"


class Config:
    def __init__(self, config_path: Optional[Path] = None) -> None:
        if config_path is None:
            config_path = Path.home() / ".config" / "idxmirror" / "idxmirror.conf"
        self.config_path = Path(config_path)
        self.config_dir = self.config_path.parent
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # Default values
        self.root_dir: Path = Path.home() / ".stackage"
        self.index_dir: Path = self.root_dir / "indices" / "hackage"

        # Index sources
        self.git_url: str = DEFAULT_GIT_URL
        self.http_url: str = DEFAULT_HTTP_URL
        self.gpg_verify: bool = False
        self.git_timeout: Optional[float] = None

        # Network Defaults
        self.timeout_connect: int = 10
        self.timeout_read: int = 60
        self.retries: int = 3
        self.verify_ssl: bool = True
        self.proxy_url: Optional[str] = None
        self.ca_bundle: Optional[str] = None

        self.load()

    def load(self) -> None:
        parser = configparser.ConfigParser()
        if not self.config_path.exists():
            _logger.warning(f"Config file {self.config_path} not found. Creating default config.")
            self._write_default_config()

        parser.read(self.config_path)

        try:
            # [general]
            self.root_dir = Path(parser.get("general", "root_dir", fallback=str(self.root_dir))).expanduser()
            idx = parser.get("general", "index_dir", fallback="")
            self.index_dir = Path(idx).expanduser() if idx else self.root_dir / "indices" / "hackage"

            # [index]
            self.git_url = parser.get("index", "git_url", fallback=self.git_url)
            self.http_url = parser.get("index", "http_url", fallback=self.http_url)
            self.gpg_verify = parser.getboolean("index", "gpg_verify", fallback=self.gpg_verify)
            gt = parser.get("index", "git_timeout", fallback="")
            self.git_timeout = float(gt) if gt and float(gt) > 0 else None

            # [network]
            if parser.has_section("network"):
                self.timeout_connect = parser.getint("network", "timeout_connect", fallback=10)
                self.timeout_read = parser.getint("network", "timeout_read", fallback=60)
                self.retries = parser.getint("network", "retries", fallback=3)
                self.verify_ssl = parser.getboolean("network", "verify_ssl", fallback=True)
                self.ca_bundle = parser.get("network", "ca_bundle", fallback=None) or None

                # Handle empty strings mapping to None
                p_url = parser.get("network", "proxy_url", fallback=None)
                self.proxy_url = p_url if p_url else None
        except ValueError as e:
            raise ConfigError(f"Invalid value in {self.config_path}: {e}") from e

        if not self.git_url or not self.http_url:
            raise ConfigError(f"git_url and http_url must be set in {self.config_path}")

    def _write_default_config(self) -> None:
        parser = configparser.ConfigParser()
        parser["general"] = {
            "root_dir": str(self.root_dir),
            "index_dir": "",
        }
        parser["index"] = {
            "git_url": self.git_url,
            "http_url": self.http_url,
            "gpg_verify": str(self.gpg_verify).lower(),
            "git_timeout": "",
        }
        parser["network"] = {
            "timeout_connect": str(self.timeout_connect),
            "timeout_read": str(self.timeout_read),
            "retries": str(self.retries),
            "verify_ssl": str(self.verify_ssl).lower(),
            "ca_bundle": self.ca_bundle or "",
            "proxy_url": self.proxy_url or "",
        }
        with self.config_path.open("w") as f:
            parser.write(f)
        _logger.info(f"Default config written to {self.config_path}")

"""
Configuration management for Basic File Browser.

This module provides a split configuration system that separates concerns
into focused configuration classes, loaded from and saved to a TOML file.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List

import toml

from .exceptions import ConfigurationError

DEFAULT_SECRET = 'development-file-id-secret'

LISTING_ORDERS = ('directories_first', 'alphabetical')


@dataclass
class StorageConfig:
    """Configuration for the managed file tree."""

    root_dir: str = 'files'

    def get_root_path(self) -> str:
        """Get the absolute, normalized storage root."""
        return os.path.abspath(self.root_dir)

    def validate(self) -> List[str]:
        """Validate the storage configuration and return any errors."""
        errors = []

        if not self.root_dir:
            errors.append("root_dir cannot be empty")

        return errors


@dataclass
class CodecConfig:
    """Configuration for the file identifier codec."""

    secret: str = field(default_factory=lambda: os.environ.get('FILE_ID_SECRET', DEFAULT_SECRET))

    def validate(self) -> List[str]:
        """Validate the codec configuration and return any errors."""
        errors = []

        if not self.secret:
            errors.append("secret cannot be empty")

        return errors


@dataclass
class ListingConfig:
    """Configuration for directory listings."""

    order: str = 'directories_first'
    hidden_prefix: str = '.'
    max_workers: int = 8

    def validate(self) -> List[str]:
        """Validate the listing configuration and return any errors."""
        errors = []

        if self.order not in LISTING_ORDERS:
            errors.append(f"order must be one of {list(LISTING_ORDERS)}")

        if not self.hidden_prefix:
            errors.append("hidden_prefix cannot be empty")

        if self.max_workers <= 0:
            errors.append("max_workers must be positive")

        return errors


@dataclass
class CsvConfig:
    """Configuration for CSV profiling and extraction."""

    chunk_size: int = 10000
    read_timeout_seconds: float = 30.0
    profile_on_resolve: bool = True

    def validate(self) -> List[str]:
        """Validate the CSV configuration and return any errors."""
        errors = []

        if self.chunk_size <= 0:
            errors.append("chunk_size must be positive")

        if self.read_timeout_seconds <= 0:
            errors.append("read_timeout_seconds must be positive")

        return errors


@dataclass
class LoggingConfig:
    """Configuration for application logging."""

    level: str = 'INFO'
    log_file: str = ''

    def validate(self) -> List[str]:
        """Validate the logging configuration and return any errors."""
        errors = []

        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if self.level.upper() not in valid_levels:
            errors.append(f"level must be one of {valid_levels}")

        return errors


@dataclass
class Config:
    """Main configuration class that combines all configuration sections."""

    config_file_path: str = "config.toml"

    # Configuration sections
    storage: StorageConfig = field(default_factory=StorageConfig)
    codec: CodecConfig = field(default_factory=CodecConfig)
    listing: ListingConfig = field(default_factory=ListingConfig)
    csv: CsvConfig = field(default_factory=CsvConfig)
    log: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Load configuration when an instance is created."""
        self.load_config()

    def to_dict(self) -> dict:
        """Return the configuration as nested TOML-ready sections."""
        return {
            'storage': {
                'root_dir': self.storage.root_dir,
            },
            'codec': {
                'secret': self.codec.secret,
            },
            'listing': {
                'order': self.listing.order,
                'hidden_prefix': self.listing.hidden_prefix,
                'max_workers': self.listing.max_workers,
            },
            'csv': {
                'chunk_size': self.csv.chunk_size,
                'read_timeout_seconds': self.csv.read_timeout_seconds,
                'profile_on_resolve': self.csv.profile_on_resolve,
            },
            'logging': {
                'level': self.log.level,
                'log_file': self.log.log_file,
            },
        }

    def save_config(self) -> None:
        """Save current configuration to TOML file."""
        try:
            with open(self.config_file_path, 'w') as f:
                toml.dump(self.to_dict(), f)
            logging.info(f"Configuration saved to {self.config_file_path}")
        except OSError as e:
            error_msg = f"Error saving configuration: {e}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg, config_file=self.config_file_path)

    def load_config(self) -> None:
        """Load configuration from TOML file."""
        try:
            with open(self.config_file_path) as f:
                config_data = toml.load(f)
        except FileNotFoundError:
            logging.info(f"{self.config_file_path} not found. Creating with default values.")
            self.save_config()
            return
        except toml.TomlDecodeError as e:
            error_msg = f"Error decoding {self.config_file_path}: {e}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg, config_file=self.config_file_path)
        except OSError as e:
            error_msg = f"Error loading configuration: {e}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg, config_file=self.config_file_path)

        if 'storage' in config_data:
            storage_config = config_data['storage']
            self.storage.root_dir = storage_config.get('root_dir', self.storage.root_dir)

        if 'codec' in config_data:
            codec_config = config_data['codec']
            self.codec.secret = codec_config.get('secret', self.codec.secret)

        if 'listing' in config_data:
            listing_config = config_data['listing']
            self.listing.order = listing_config.get('order', self.listing.order)
            self.listing.hidden_prefix = listing_config.get('hidden_prefix', self.listing.hidden_prefix)
            self.listing.max_workers = listing_config.get('max_workers', self.listing.max_workers)

        if 'csv' in config_data:
            csv_config = config_data['csv']
            self.csv.chunk_size = csv_config.get('chunk_size', self.csv.chunk_size)
            self.csv.read_timeout_seconds = csv_config.get('read_timeout_seconds', self.csv.read_timeout_seconds)
            self.csv.profile_on_resolve = csv_config.get('profile_on_resolve', self.csv.profile_on_resolve)

        if 'logging' in config_data:
            logging_config = config_data['logging']
            self.log.level = logging_config.get('level', self.log.level)
            self.log.log_file = logging_config.get('log_file', self.log.log_file)

        logging.info(f"Configuration loaded from {self.config_file_path}")

        errors = self.validate()
        if errors:
            error_msg = f"Invalid configuration in {self.config_file_path}: {'; '.join(errors)}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg, config_file=self.config_file_path)

    def validate(self) -> List[str]:
        """Validate all configuration sections and return any errors."""
        errors = []
        errors.extend(self.storage.validate())
        errors.extend(self.codec.validate())
        errors.extend(self.listing.validate())
        errors.extend(self.csv.validate())
        errors.extend(self.log.validate())
        return errors

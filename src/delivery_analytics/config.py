"""
Configuration handling for the food delivery analytics pipeline.
"""
import os
import logging
import configparser
from pathlib import Path
from datetime import date
from dotenv import load_dotenv

load_dotenv()
# Connection settings may come from the environment or a .env file
DB_TYPE = os.getenv("ANALYTICS_DB_TYPE", "sqlite")
DB_NAME = os.getenv("ANALYTICS_DB_NAME", "food_delivery.db")
DB_HOST = os.getenv("ANALYTICS_DB_HOST", "localhost")
DB_PORT = os.getenv("ANALYTICS_DB_PORT", "5432")
DB_USER = os.getenv("ANALYTICS_DB_USER", "")
DB_PASSWORD = os.getenv("ANALYTICS_DB_PASSWORD", "")

DATABASE_KEYS = ('type', 'name', 'host', 'port', 'user', 'password')
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class Config:
    """Configuration manager for the food delivery analytics pipeline."""

    def __init__(self, config_file='config.ini'):
        """
        Read settings from `config_file` on top of the built-in defaults.
        """
        self.config = configparser.ConfigParser()
        self._set_defaults()

        if Path(config_file).exists():
            self.config.read(config_file)
            self._setup_logging()
        else:
            print(f"Warning: Config file {config_file} not found. Using defaults.")

    def _set_defaults(self):
        self.config.read_dict({
            'DATABASE': {
                'type': DB_TYPE,
                'name': DB_NAME,
                'host': DB_HOST,
                'port': DB_PORT,
                'user': DB_USER,
                'password': DB_PASSWORD
            },
            'LOGGING': {
                'level': 'INFO',
                'file': 'logs/pipeline.log'
            },
            'PATHS': {
                'input_dir': 'data/input',
                'output_dir': 'data/output'
            },
            'PIPELINE': {
                'source': 'csv',
                'quality_check': 'true',
                'write_db': 'false'
            },
            # Thresholds and years used by the reports
            'ANALYSIS': {
                'reference_date': '',
                'customer_name': 'Arjun Mehta',
                'top_n': '5',
                'high_frequency_min_orders': '750',
                'high_value_min_spend': '100000',
                'previous_year': '2023',
                'current_year': '2024',
                'revenue_year': '2023',
                'rider_commission_rate': '0.08'
            }
        })

    def _setup_logging(self):
        """Send log records to the configured file and to the console."""
        settings = self.config['LOGGING']
        log_file = settings.get('file')

        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        logging.basicConfig(
            level=getattr(logging, settings.get('level', 'INFO').upper()),
            format=LOG_FORMAT,
            handlers=[
                logging.FileHandler(log_file),
                logging.StreamHandler()
            ]
        )

    def get_database_config(self):
        """
        Connection settings from the [DATABASE] section.
        """
        return {key: self.config['DATABASE'].get(key) for key in DATABASE_KEYS}

    def _get_dir(self, key, filename=None):
        directory = self.config['PATHS'].get(key)
        os.makedirs(directory, exist_ok=True)
        if filename:
            return os.path.join(directory, filename)
        return directory

    def get_input_path(self, filename=None):
        """
        Source CSV directory, or a file inside it. The directory is created if needed.
        """
        return self._get_dir('input_dir', filename)

    def get_output_path(self, filename=None):
        """
        Report export directory, or a file inside it. The directory is created if needed.
        """
        return self._get_dir('output_dir', filename)

    def get_source(self):
        """
        Where the snapshot is read from: 'csv' or 'database'.
        """
        source = self.config['PIPELINE'].get('source', 'csv').lower()
        if source not in ('csv', 'database'):
            raise ValueError(f"Unsupported data source: {source}")
        return source

    def is_quality_check_enabled(self):
        """
        Check if data quality checks are enabled.
        """
        return self.config['PIPELINE'].getboolean('quality_check', True)

    def is_db_write_enabled(self):
        """
        Check if report tables should be written to the database.
        """
        return self.config['PIPELINE'].getboolean('write_db', False)

    def get_reference_date(self):
        """
        Reference "now" for trailing-window reports. Falls back to today.
        """
        value = self.config['ANALYSIS'].get('reference_date', '').strip()
        if not value:
            return date.today()
        return date.fromisoformat(value)

    def get_analysis_params(self):
        """
        Get report parameters keyed by the argument names the reports accept.
        """
        analysis = self.config['ANALYSIS']
        return {
            'reference_date': self.get_reference_date(),
            'customer_name': analysis.get('customer_name'),
            'top_n': analysis.getint('top_n', 5),
            'min_orders': analysis.getint('high_frequency_min_orders', 750),
            'min_spend': analysis.getfloat('high_value_min_spend', 100000.0),
            'previous_year': analysis.getint('previous_year', 2023),
            'current_year': analysis.getint('current_year', 2024),
            'year': analysis.getint('revenue_year', 2023),
            'commission_rate': analysis.getfloat('rider_commission_rate', 0.08)
        }

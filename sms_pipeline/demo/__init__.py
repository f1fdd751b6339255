"""Demo module for running the pipeline over exported SMS CSV files"""

from .csv_message_loader import MessageCsvLoader

__all__ = ['MessageCsvLoader']

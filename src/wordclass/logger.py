"""
Reusable logging utilities for clustering runs.

This module provides a Logger class that can be instantiated, configured,
and passed to components. It supports:
- Console output (stdout) and optional file output with timestamps
- Date-based log directory structure (<log_dir>/YYYY/MM/DD/)
- Callable interface for easy integration
- Separator and header formatting utilities
"""

import os
import sys
import logging
from datetime import datetime
from typing import Optional


class Logger:
	"""
	Logger that writes to the console and, optionally, to a file.

	Can be passed to components that accept a logging function (Callable[[str], None]).

	Usage:
		logger = Logger("clustering", log_dir="logs")
		logger("Reading corpus...")
		logger.header("Results")

		optimizer = ExchangeOptimizer(stats, state, logger=logger)

	Attributes:
		name: Logger name (used for the log filename)
		log_file: Path to the log file, or None when only logging to console
	"""

	def __init__(
		self,
		name: str = "wordclass",
		log_dir: Optional[str] = None,
		console: bool = True,
		timestamp_format: str = '%H:%M:%S',
		plain_console: bool = True,
	):
		"""
		Initialize logger.

		Args:
			name: Base name for the log file (e.g., "clustering")
			log_dir: Root log directory; a YYYY/MM/DD subdirectory is created.
				None disables file output.
			console: Whether to also log to stdout
			timestamp_format: strftime format for log timestamps
			plain_console: Write bare messages to the console (timestamps
				only go to the file)
		"""
		self.name = name
		self._console = console
		self._timestamp_format = timestamp_format
		self.log_file: Optional[str] = None

		timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
		self._logger = logging.getLogger(f'wordclass.run.{name}.{timestamp}.{id(self)}')
		self._logger.setLevel(logging.INFO)
		self._logger.propagate = False
		self._logger.handlers.clear()

		formatter = logging.Formatter(
			'%(asctime)s | %(message)s',
			datefmt=timestamp_format
		)

		if log_dir is not None:
			now = datetime.now()
			day_dir = os.path.join(
				log_dir,
				now.strftime("%Y"),
				now.strftime("%m"),
				now.strftime("%d")
			)
			os.makedirs(day_dir, exist_ok=True)
			self.log_file = os.path.join(day_dir, f"{name}_{timestamp}.log")

			file_handler = logging.FileHandler(self.log_file)
			file_handler.setLevel(logging.INFO)
			file_handler.setFormatter(formatter)
			self._logger.addHandler(file_handler)

		if console:
			console_handler = logging.StreamHandler(sys.stdout)
			console_handler.setLevel(logging.INFO)
			console_handler.setFormatter(
				logging.Formatter('%(message)s') if plain_console else formatter
			)
			console_handler.addFilter(lambda record: not getattr(record, "file_only", False))
			self._logger.addHandler(console_handler)

	def __call__(self, message: str = "", flush: bool = True) -> None:
		"""Log a message. Makes Logger callable for easy integration."""
		self.log(message, flush=flush)

	def log(self, message: str = "", flush: bool = True, file_only: bool = False) -> None:
		"""
		Log a message to the configured handlers.

		Args:
			message: Message to log
			flush: Whether to flush handlers immediately
			file_only: Skip the console handler (no-op without a log file)
		"""
		self._logger.info(message, extra={"file_only": file_only})
		if flush:
			for handler in self._logger.handlers:
				handler.flush()

	def separator(self, char: str = "=", width: int = 70) -> None:
		"""Log a separator line."""
		self.log(char * width)

	def header(self, title: str, char: str = "=", width: int = 70) -> None:
		"""Log a formatted header."""
		self.log()
		self.separator(char, width)
		self.log(f"  {title}")
		self.separator(char, width)

	def close(self) -> None:
		"""Detach and close all handlers."""
		for handler in list(self._logger.handlers):
			handler.close()
			self._logger.removeHandler(handler)

	def __repr__(self) -> str:
		return f"Logger(name='{self.name}', log_file='{self.log_file}')"

"""
Logger for the maven wrapper. Every record is emitted as a single JSON line.
"""

import inspect
import logging
from datetime import datetime

from pydantic import BaseModel


class LogLine(BaseModel):
    """
    Represents a line in the wrapper log
    """

    time: str
    level: str
    caller_file: str
    caller_name: str
    caller_line: int
    message: str


class WrapperLogger:
    """
    Logger class
    """

    def __init__(self, name: str = "maven_wrapper") -> None:
        self.logger = logging.getLogger(name)
        if self.logger.level == logging.NOTSET:
            self.logger.setLevel(logging.INFO)

    def log(self, message: str, level: int) -> None:
        """
        Log the message at the given level as a JSON line
        """
        if not self.logger.isEnabledFor(level):
            return

        message = message.replace("\n", " ")

        caller = inspect.stack()[1]
        log_line = LogLine(
            time=str(datetime.now()),
            level=logging.getLevelName(level),
            caller_file=caller.filename,
            caller_name=caller.function,
            caller_line=caller.lineno,
            message=message,
        )

        self.logger.log(level=level, msg=log_line.model_dump_json())

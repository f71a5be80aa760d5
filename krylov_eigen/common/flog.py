'''
Console and file logging with indentation levels for the eigensolver drivers.

The Logger wraps a standard library logger: messages are prefixed with a tabulator
marker per indentation level, optionally colorized on a terminal and optionally
mirrored into a log file.

@note File logging is enabled when the environment variable PYLOGFILE is set to a non-zero value.
@note Colored output is disabled when the environment variable PYLOGCOLORS is set to '0'.

-------------------------------------------------------
file        :   krylov_eigen/common/flog.py
description :   Logger with verbosity control used by the iteration drivers.
-------------------------------------------------------
'''

__all__         = [
    "Logger",
    "Colors",
    "get_global_logger",
]

import os
import re
import sys
import logging
import threading
from datetime import datetime
from typing import Optional

######################################################
#! COLORS
######################################################

class Colors:
    """
    ANSI color codes for console output.
    """

    black   = "\033[30m"
    red     = "\033[31m"
    green   = "\033[32m"
    yellow  = "\033[33m"
    blue    = "\033[34m"
    white   = "\033[0m"  # Reset / default color

    def __init__(self, color : str):
        self.color = color

    def __str__(self) -> str:
        mapping = {
            "black" : Colors.black,
            "red"   : Colors.red,
            "green" : Colors.green,
            "yellow": Colors.yellow,
            "blue"  : Colors.blue,
            "white" : Colors.white
        }
        return mapping.get(self.color, Colors.white)

# ESC [ ... m sequences
_ansi_escape = re.compile(r'\x1b\[[0-9;]*m')

class StripAnsiFormatter(logging.Formatter):
    '''Formatter for log files: drops the color codes.'''

    def format(self, record):
        msg = super().format(record)
        return _ansi_escape.sub('', msg)

######################################################
#! LOGGER
######################################################

ENV_LOGGER_FILE     = 'PYLOGFILE'
ENV_LOGGER_COLORS   = 'PYLOGCOLORS'

class Logger:
    """
    Logger class for handling console and file logging with verbosity control.
    """

    LEVELS = {
        logging.DEBUG   : 'debug',
        logging.INFO    : 'info',
        logging.WARNING : 'warning',
        logging.ERROR   : 'error'
    }

    LEVELS_R = {v: k for k, v in LEVELS.items()}

    def __init__(self,
                name            : str           = "Global",
                logfile         : Optional[str] = None,
                lvl             : int           = logging.INFO,
                append_ts       : bool          = False,
                use_ts_in_cmd   : bool          = False):
        """
        Initialize the logger instance.

        Args:
            name (str):
                Name of the underlying standard library logger.
            logfile (str):
                Name of the log file (without extension, if empty a timestamp is used).
                Only honored when PYLOGFILE is set.
            lvl (int or str):
                Logging level (default: logging.INFO).
            append_ts (bool):
                Whether to append a timestamp to the log file name.
            use_ts_in_cmd (bool):
                Whether to print a timestamp in the console output.
        """
        self.now                = datetime.now()
        self.now_str            = self.now.strftime("%d_%m_%Y_%H-%M_%S")
        self.lvl                = Logger.LEVELS_R.get(lvl, logging.INFO) if isinstance(lvl, str) else lvl
        self.handler_added      = False
        self.has_colors         = sys.stdout.isatty() and os.environ.get(ENV_LOGGER_COLORS, '1') != '0'

        self.logger             = logging.getLogger(name or __name__)
        self.logger.setLevel(self.lvl)
        self.logger.propagate   = False

        # a logger rebuilt under the same name replaces its handlers
        for h in list(self.logger.handlers):
            self.logger.removeHandler(h)
            h.close()

        console_fmt = '%(asctime)s [%(levelname)s] %(message)s' if use_ts_in_cmd else '[%(levelname)s] %(message)s'
        ch          = logging.StreamHandler(sys.stdout)
        ch.setLevel(self.lvl)
        ch.setFormatter(logging.Formatter(console_fmt, datefmt="%d_%m_%Y_%H-%M_%S"))
        self.logger.addHandler(ch)

        if logfile is not None and os.environ.get(ENV_LOGGER_FILE, '0') != '0':
            self.logfile = (logfile.split('.log')[0] if logfile.endswith('.log') else f'{logfile}') if len(logfile) > 0 else self.now_str
            if append_ts:
                self.logfile += f'_{self.now_str}'
            self.configure("./log")
        else:
            self.logfile = self.now_str

    # --------------------------------------------------------------

    @staticmethod
    def colorize(txt: str, color: str):
        """
        Apply color to the given text (for console output).
        """
        if not color or color.lower() == 'white':
            return str(txt)
        return str(Colors(color)) + str(txt) + Colors.white

    # --------------------------------------------------------------

    def configure(self, directory: str):
        """
        Attach a file handler writing into `directory`.

        Args:
            directory (str): Path to the directory where log files will be stored.
        """
        base_name       = self.now_str if len(self.logfile) == 0 else self.logfile
        self.logfile    = os.path.join(directory, f'{base_name}.log')
        os.makedirs(directory, exist_ok=True)

        if not self.handler_added:
            self._f_handler = logging.FileHandler(self.logfile, encoding='utf-8')
            self._f_handler.setLevel(self.lvl)
            self._f_handler.setFormatter(StripAnsiFormatter('%(asctime)s [%(levelname)s] %(message)s', datefmt="%d_%m_%Y_%H-%M-%S"))
            self.logger.addHandler(self._f_handler)
            self.handler_added = True
            self.info(f"Log file created: {self.logfile}")

    # --------------------------------------------------------------

    @staticmethod
    def print_tab(lvl=0):
        """
        Indentation prefix for a message at level `lvl`.
        """
        return '\t' * lvl + ('->' if lvl > 0 else '')

    @staticmethod
    def print(msg: str, lvl=0):
        return f"{Logger.print_tab(lvl)}{msg}"

    # --------------------------------------------------------------

    def _emit(self, log_level: int, msg: str, lvl: int, verbose: bool, color: Optional[str]):
        if not verbose:
            return
        if color is not None and self.has_colors:
            msg = self.colorize(msg, color)
        log_function = getattr(self.logger, self.LEVELS.get(log_level, 'info'))
        log_function(Logger.print(msg, lvl))

    def info(self, msg: str, lvl=0, verbose=True, color=None):
        """
        Log an informational message if verbosity is enabled.

        Args:
            msg (str)       : Message to log.
            lvl (int)       : Indentation level.
            verbose (bool)  : Log if True (default: True).
            color (str)     : Optional color for the message.
        """
        self._emit(logging.INFO, msg, lvl, verbose, color)

    def debug(self, msg: str, lvl=0, verbose=True, color=None):
        self._emit(logging.DEBUG, msg, lvl, verbose, color)

    def warning(self, msg: str, lvl=0, verbose=True, color='yellow'):
        self._emit(logging.WARNING, msg, lvl, verbose, color)


######################################################
#! GLOBAL LOGGER
######################################################

_G_LOGGER     = None
_G_LOGGER_PID = None
_G_LOCK       = threading.Lock()

def get_global_logger(**kwargs) -> Logger:
    """
    One Logger per process (PID), safe across threads and forks.

    Args:
        **kwargs: Arguments to pass to the Logger constructor.
        - name (str): Name of the logger (default: "krylov_eigen").
        - lvl (int): Logging level (default: logging.INFO).
        - append_ts (bool): Whether to append timestamps to the log file (default: True).
        - use_ts_in_cmd (bool): Whether to print timestamps on the console (default: True).
        - logfile (str or None): Path to a logfile (default: None).

    Example
    -------
        >>> logger = get_global_logger()
        >>> logger.info("IRLM: 42 iterations for operator of size 100")
    """
    global  _G_LOGGER, _G_LOGGER_PID
    pid     = os.getpid()

    if _G_LOGGER is not None and _G_LOGGER_PID == pid:
        return _G_LOGGER

    with _G_LOCK:
        if _G_LOGGER is not None and _G_LOGGER_PID == pid:
            return _G_LOGGER

        _G_LOGGER       = Logger(
                            name            = kwargs.get("name",            "krylov_eigen"),
                            lvl             = kwargs.get("lvl",             logging.INFO),
                            append_ts       = kwargs.get("append_ts",       True),
                            use_ts_in_cmd   = kwargs.get("use_ts_in_cmd",   True),
                            logfile         = kwargs.get("logfile",         None),
                        )
        _G_LOGGER_PID   = pid
        return _G_LOGGER

######################################################

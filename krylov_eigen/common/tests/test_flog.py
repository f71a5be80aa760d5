'''
Tests of the Logger used by the iteration drivers.
'''

import logging
import os

from krylov_eigen.common.flog import Logger, Colors, get_global_logger, ENV_LOGGER_FILE

# -------------------------------------------------------------------

def test_indentation_prefix():
    assert Logger.print_tab(0) == ''
    assert Logger.print_tab(2) == '\t\t->'
    assert Logger.print("msg", 1) == '\t->msg'

def test_console_output(capsys):
    logger = Logger(name="flog-console")
    logger.info("IRLM: 10 iterations for operator of size 5", lvl=1)
    logger.warning("budget exhausted")
    logger.debug("hidden at INFO level")
    out = capsys.readouterr().out
    assert "[INFO] \t->IRLM: 10 iterations for operator of size 5" in out
    assert "[WARNING] budget exhausted" in out
    assert "hidden" not in out

def test_verbose_flag(capsys):
    logger = Logger(name="flog-quiet")
    logger.info("not shown", verbose=False)
    assert capsys.readouterr().out == ""

def test_rebuilt_logger_has_one_handler():
    Logger(name="flog-handlers")
    logger = Logger(name="flog-handlers")
    assert len(logger.logger.handlers) == 1

def test_colors():
    assert str(Colors("red")) == Colors.red
    assert str(Colors("unknown")) == Colors.white
    assert Logger.colorize("x", "white") == "x"
    assert Logger.colorize("x", "green") == Colors.green + "x" + Colors.white

def test_file_logging(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(ENV_LOGGER_FILE, '1')
    logger = Logger(name="flog-file", logfile="run.log", lvl=logging.DEBUG)
    logger.info(logger.colorize("colored line", "red"))
    for h in logger.logger.handlers:
        h.flush()
    path = os.path.join("log", "run.log")
    assert os.path.isfile(path)
    with open(path, encoding='utf-8') as f:
        content = f.read()
    assert "colored line" in content
    assert "\033[" not in content

def test_global_logger_is_shared():
    assert get_global_logger() is get_global_logger()

# -------------------------------------------------------------------
#! End of file
# -------------------------------------------------------------------

import os, subprocess
import logging
import logging.handlers

from ..const import const


def read_file(filepath):
  """Returns the content of the file, or None when it cannot be read."""
  try:
    with open(filepath) as f:
      return f.read()
  except OSError:
    return None


def write_file(filepath, contents, mode=None, owner=None):
  """Writes the file only when the contents differ.

  :param mode: file mode applied after writing (also when unchanged)
  :param owner: (uid, gid) tuple applied after writing
  :return: True when the file is created or updated
  """
  dirname = os.path.dirname(filepath)
  if dirname and not os.path.isdir(dirname):
    os.makedirs(dirname)
    if owner:
      os.chown(dirname, owner[0], owner[1])
      pass
    pass

  updated = read_file(filepath) != contents
  if updated:
    with open(filepath, "w") as f:
      f.write(contents)
      pass
    pass

  if mode is not None:
    os.chmod(filepath, mode)
    pass
  if owner:
    os.chown(filepath, owner[0], owner[1])
    pass
  return updated


def make_dirs(dirpath, mode=None, owner=None):
  """mkdir -p followed by chmod/chown of the leaf directory."""
  if not os.path.isdir(dirpath):
    os.makedirs(dirpath)
    pass
  if mode is not None:
    os.chmod(dirpath, mode)
    pass
  if owner:
    os.chown(dirpath, owner[0], owner[1])
    pass
  pass


def run_quietly(argv):
  """Runs a command and returns (returncode, stdout). Missing command is 127."""
  try:
    proc = subprocess.run(argv, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
  except FileNotFoundError:
    return (127, "")
  return (proc.returncode, proc.stdout.decode('iso-8859-1'))


global _logger_
_logger_ = None

_log_format = '%(asctime)s %(processName)-10s/%(threadName)s %(name)s %(levelname)-8s %(message)s'

#
#
#
def setup_kiosk_logger(logger, log_level=None, filename=None, stream=None):
  if log_level is None:
    log_level = logging.INFO
    pass

  if stream is not None:
    klog_handler = logging.StreamHandler(stream)
  else:
    if filename is None:
      filename = os.environ.get(const.KIOSK_LOG_FILE)
      pass
    if filename is None:
      if os.getuid() == 0:
        filename = '/var/log/pi-kiosk-setup.log'
      else:
        filename = '/tmp/pi-kiosk.log'
        pass
      pass
    # opened on the first record, not at import
    klog_handler = logging.handlers.RotatingFileHandler(filename, maxBytes=2**24, backupCount=3, delay=True)
    pass
  klog_handler.setFormatter(logging.Formatter(_log_format))

  if logger:
    while len(logger.handlers):
      old_handler = logger.handlers[0]
      logger.removeHandler(old_handler)
      old_handler.close()
      pass
    logger.addHandler(klog_handler)
    logger.setLevel(log_level)
    pass
  return logger


def get_kiosk_logger() -> logging.Logger:
  global _logger_
  if _logger_ is None:
    _logger_ = logging.getLogger('kiosk')
    setup_kiosk_logger(_logger_)
  return _logger_

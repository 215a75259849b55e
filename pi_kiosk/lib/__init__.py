from .util import get_kiosk_logger, setup_kiosk_logger


class KioskSetupError(Exception):
  """Raised by provisioning tasks when the target system is not in a state they can work with."""
  pass

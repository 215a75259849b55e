#
# Who is the kiosk user
#
import os, pwd, grp
from collections import namedtuple

from ..const import const
from . import KioskSetupError

kiosk_user = namedtuple('kiosk_user', ['name', 'uid', 'gid', 'home'])


def lookup_user(name):
  try:
    entry = pwd.getpwnam(name)
  except KeyError:
    raise KioskSetupError("User %s does not exist." % name)
  return kiosk_user(entry.pw_name, entry.pw_uid, entry.pw_gid, entry.pw_dir)


def first_user():
  """The uid 1000 account that Raspberry Pi OS creates on first boot."""
  try:
    entry = pwd.getpwuid(1000)
  except KeyError:
    return None
  return kiosk_user(entry.pw_name, entry.pw_uid, entry.pw_gid, entry.pw_dir)


def resolve_kiosk_user(name=None, environ=None):
  """Picks the user the kiosk runs as.

  Order: explicit name, $SUDO_USER, $KIOSK_USER, then the uid 1000 account.
  root is never a kiosk user.
  """
  if environ is None:
    environ = os.environ
    pass
  for candidate in [name, environ.get(const.SUDO_USER), environ.get(const.KIOSK_USER)]:
    if candidate and candidate != 'root':
      return lookup_user(candidate)
    pass
  user = first_user()
  if user is None:
    raise KioskSetupError("Cannot determine the kiosk user. Run with sudo from the user's account or pass --user.")
  return user


def user_groups(name):
  """Supplementary group names of the user."""
  return sorted([group.gr_name for group in grp.getgrall() if name in group.gr_mem])


def group_exists(group):
  try:
    grp.getgrnam(group)
  except KeyError:
    return False
  return True

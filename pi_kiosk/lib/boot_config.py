import re
import sys
import typing

from ..const import const
from .util import read_file, write_file

#
# Raspberry Pi firmware config.txt
#
# # For more options and information see
# # http://rptl.io/configtxt
# dtparam=audio=on
# camera_auto_detect=1
# dtoverlay=vc4-kms-v3d
# max_framebuffers=2
#
# [cm4]
# otg_mode=1
#
# [all]
#

class boot_setting:
  """One managed key=value setting in config.txt.

  For dtoverlay and dtparam the key alone does not identify a setting, so the
  first field of the value (the overlay or parameter name) is part of the
  identity.
  """
  key: str

  def __init__(self, key: str, value: typing.Optional[str] = None):
    self.key = key
    self.value = value
    self.selector = None
    if key in const.multi_value_keys and value:
      self.selector = re.split('[,=]', value, 1)[0]
      pass

    rex = r'^\s*(#?)\s*{key}\s*=\s*(.*)$'.format(key=re.escape(key))
    self.line_re = re.compile(rex)
    pass

  def match(self, line):
    """Returns (commented, value) when the line is about this setting, else None."""
    matched = self.line_re.match(line)
    if not matched:
      return None
    value = matched.group(2).strip()
    if self.selector is not None and re.split('[,=]', value, 1)[0] != self.selector:
      return None
    return (matched.group(1) == '#', value)

  def generate_line(self):
    return '{}={}'.format(self.key, self.value)

  def __repr__(self):
    return self.generate_line() if self.value is not None else self.key
  pass


class boot_config:
  """config.txt manipulation"""
  section_re = re.compile(r'^\s*\[([^\]]+)\]\s*$')

  def __init__(self, filename):
    self.filename = filename
    self.lines = None
    pass

  def open(self):
    contents = read_file(self.filename)
    if contents is None:
      raise FileNotFoundError(self.filename)
    self.original = contents
    self.lines = contents.splitlines()
    pass

  def _last_section(self):
    section = 'all'
    for line in self.lines:
      matched = self.section_re.match(line)
      if matched:
        section = matched.group(1).strip()
        pass
      pass
    return section

  def set_option(self, key, value):
    """Makes key=value appear exactly once, uncommented, where every board reads it.

    Only a line before the first filter or under [all] is reused. The same
    setting under a model filter such as [pi4] is commented out.
    """
    if self.lines is None:
      raise Exception("config.txt has not been open.")
    setting = boot_setting(key, value)
    found = False
    section = 'all'
    for i_line in range(len(self.lines)):
      section_matched = self.section_re.match(self.lines[i_line])
      if section_matched:
        section = section_matched.group(1).strip()
        continue
      matched = setting.match(self.lines[i_line])
      if matched is None:
        continue
      commented, _ = matched
      if not found and section == 'all':
        self.lines[i_line] = setting.generate_line()
        found = True
      elif not commented:
        # duplicate, or filtered to some boards only
        self.lines[i_line] = '#' + self.lines[i_line].lstrip()
        pass
      pass

    if not found:
      if self._last_section() != 'all':
        self.lines.append('[all]')
        pass
      self.lines.append(setting.generate_line())
      pass
    pass

  def suppress_option(self, key, value=None):
    """Comments out every uncommented occurrence of the setting."""
    if self.lines is None:
      raise Exception("config.txt has not been open.")
    setting = boot_setting(key, value)
    for i_line in range(len(self.lines)):
      matched = setting.match(self.lines[i_line])
      if matched and not matched[0]:
        self.lines[i_line] = '#' + self.lines[i_line].lstrip()
        pass
      pass
    pass

  def active_values(self, key):
    """Values of the uncommented lines for the key."""
    setting = boot_setting(key)
    values = []
    for line in self.lines:
      matched = setting.match(line)
      if matched and not matched[0]:
        values.append(matched[1])
        pass
      pass
    return values

  def generate(self) -> typing.Tuple[bool, str]:
    if self.lines is None:
      raise Exception("config.txt has not been open.")
    generated = "\n".join(self.lines + [""])
    return (generated != self.original, generated)
  pass


def split_setting(setting):
  """'key=value' -> (key, value); 'key' -> (key, None)"""
  if '=' in setting:
    key, value = setting.split('=', 1)
    return (key.strip(), value.strip())
  return (setting.strip(), None)


def patch_boot_config(filename, settings=(), suppressed=()) -> bool:
  """Upserts settings and comments out suppressed ones. Writes only when changed.

  :param settings: iterable of 'key=value'
  :param suppressed: iterable of 'key' or 'key=value' (dtoverlay)
  :return: True when the file is updated
  """
  config = boot_config(filename)
  config.open()
  for setting in suppressed:
    config.suppress_option(*split_setting(setting))
    pass
  for setting in settings:
    config.set_option(*split_setting(setting))
    pass
  updated, contents = config.generate()
  if updated:
    write_file(filename, contents)
    pass
  return updated


if __name__ == "__main__":
  filename = "/boot/firmware/config.txt"
  if len(sys.argv) > 1:
    filename = sys.argv[1]
    pass

  config = boot_config(filename)
  config.open()
  config.suppress_option("dtoverlay", "vc4-fkms-v3d")
  config.set_option("dtoverlay", "vc4-kms-v3d")
  config.set_option("disable_overscan", "1")

  updated, new_config = config.generate()
  print( "Updated" if updated else "Unchanged")
  if updated:
    print(new_config)
    pass
  pass

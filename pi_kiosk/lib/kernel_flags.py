#
# Raspberry Pi cmdline.txt
#
# console=serial0,115200 console=tty1 root=PARTUUID=4e639091-02 rootfstype=ext4 fsck.repair=yes rootwait
#
# The whole kernel command line is a single line. Flags are either a bare
# word or tag=value.
#

import re
import typing

from .util import read_file


class kernel_flags:
  tag_value_re = re.compile(r"(\w[\w_\.\-]*)=(.*)")

  def __init__(self, cmdline):
    self.values = {}
    self.flags = []
    if cmdline:
      self.set_cmdline(cmdline)
      pass
    pass

  def set_cmdline(self, cmdline):
    for flag in cmdline.split():
      match2 = self.tag_value_re.match(flag)
      if match2:
        # console= may appear more than once. Keep them as separate flags.
        if match2.group(1) in self.values:
          self.flags.append(flag)
        else:
          self.flags.append(match2.group(1))
          self.values[match2.group(1)] = match2.group(2)
          pass
        pass
      else:
        self.flags.append(flag)
        pass
      pass
    pass

  def set_flag(self, flag):
    if not flag in self.flags:
      self.flags.append(flag)
      pass
    pass

  def set_tag_value(self, tag, value):
    self.set_flag(tag)
    self.values[tag] = value
    pass

  def remove_flag(self, flag):
    if flag in self.flags:
      self.flags.remove(flag)
      pass
    if flag in self.values:
      del self.values[flag]
      pass
    pass

  def remove_flags_with_prefix(self, prefix):
    for flag in [flag for flag in self.flags if flag.startswith(prefix)]:
      self.remove_flag(flag)
      pass
    pass

  def has_flag(self, flag):
    return flag in self.flags

  def get_value(self, tag):
    return self.values.get(tag)

  def get_cmdline(self):
    return " ".join( [ "%s%s" % (flag, "" if not flag in self.values else ("=%s" % self.values[flag])) for flag in self.flags ] )
  pass


def patch_cmdline(filename, flags=None, removed=(), removed_prefixes=()) -> typing.Tuple[bool, str]:
  """Sets and removes flags in cmdline.txt.

  :param flags: dict of flag -> value. None value is for a bare flag.
  :param removed: flags to drop. tag=value pairs are matched by tag or by the whole pair.
  :param removed_prefixes: flags starting with any of these are dropped.
  :return: (updated, new contents). The file is not written.
  """
  original = read_file(filename)
  if original is None:
    raise FileNotFoundError(filename)

  kflags = kernel_flags(original.strip())
  for flag in removed:
    if '=' in flag:
      tag, value = flag.split('=', 1)
      if kflags.get_value(tag) == value:
        kflags.remove_flag(tag)
        pass
      kflags.remove_flag(flag)
    else:
      kflags.remove_flag(flag)
      pass
    pass
  for prefix in removed_prefixes:
    kflags.remove_flags_with_prefix(prefix)
    pass
  for flag, value in (flags or {}).items():
    if value is None:
      kflags.set_flag(flag)
    else:
      kflags.set_tag_value(flag, value)
      pass
    pass

  generated = kflags.get_cmdline() + "\n"
  return (generated != original, generated)


if __name__ == "__main__":
  flags = kernel_flags("console=serial0,115200 console=tty1 root=PARTUUID=4e639091-02 rootfstype=ext4 fsck.repair=yes rootwait quiet init=/usr/lib/raspberrypi-sys-mods/firstboot systemd.run=/boot/firstrun.sh systemd.run_success_action=reboot systemd.unit=kernel-command-line.target")
  print(flags.get_cmdline())

  flags.set_tag_value("consoleblank", "0")
  flags.set_flag("logo.nologo")
  flags.remove_flags_with_prefix("systemd.run")
  flags.remove_flag("systemd.unit")
  print(flags.get_cmdline())
  pass

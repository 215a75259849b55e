#
"""tasks to configure the kiosk's files
"""

import os, shutil

from ..ops.tasks import op_task_python_simple
from ..lib import get_kiosk_logger, KioskSetupError
from ..lib.util import read_file, write_file, make_dirs
from ..lib.boot_config import patch_boot_config
from ..lib.kernel_flags import patch_cmdline

klog = get_kiosk_logger()


class task_write_file(op_task_python_simple):
  """Write a file. Overwritten on every run, written only when it differs."""
  def __init__(self, description, path, contents, mode=0o644, owner=None, **kwargs):
    super().__init__(description, **kwargs)
    self.path = path
    self.contents = contents
    self.mode = mode
    self.owner = owner
    pass

  def run_python(self):
    if write_file(self.path, self.contents, mode=self.mode, owner=self.owner):
      return "%s written." % self.path
    return "%s is up to date." % self.path

  def explain(self):
    return "Write %s (mode %o)" % (self.path, self.mode)
  pass


class task_append_once(op_task_python_simple):
  """Append a block to a file unless the marker is already in it."""
  def __init__(self, description, path, block, marker, owner=None, **kwargs):
    super().__init__(description, **kwargs)
    self.path = path
    self.block = block
    self.marker = marker
    self.owner = owner
    pass

  def run_python(self):
    current = read_file(self.path)
    if current is None:
      current = ""
      pass
    if self.marker in current:
      return "%s already has it." % self.path
    if current and not current.endswith("\n"):
      current = current + "\n"
      pass
    write_file(self.path, current + self.block, owner=self.owner)
    return "Appended to %s." % self.path

  def explain(self):
    return "Append to %s unless it contains '%s'" % (self.path, self.marker)
  pass


class task_make_dirs(op_task_python_simple):
  def __init__(self, description, path, mode=0o755, owner=None, **kwargs):
    super().__init__(description, **kwargs)
    self.path = path
    self.mode = mode
    self.owner = owner
    pass

  def run_python(self):
    make_dirs(self.path, mode=self.mode, owner=self.owner)
    pass

  def explain(self):
    return "mkdir -p %s" % self.path
  pass


class task_patch_boot_config(op_task_python_simple):
  """Upsert key=value settings in config.txt and comment out suppressed ones."""
  def __init__(self, description, path, settings, suppressed, **kwargs):
    super().__init__(description, **kwargs)
    self.path = path
    self.settings = settings
    self.suppressed = suppressed
    pass

  def run_python(self):
    if not os.path.exists(self.path):
      raise KioskSetupError("%s does not exist. Is this a Raspberry Pi OS image?" % self.path)
    if patch_boot_config(self.path, self.settings, self.suppressed):
      return "%s updated." % self.path
    return "%s is up to date." % self.path

  def explain(self):
    return "Set %s, comment out %s in %s" % (" ".join(self.settings), " ".join(self.suppressed), self.path)
  pass


class task_patch_cmdline(op_task_python_simple):
  def __init__(self, description, path, flags=None, removed=(), removed_prefixes=(), **kwargs):
    super().__init__(description, **kwargs)
    self.path = path
    self.flags = flags or {}
    self.removed = removed
    self.removed_prefixes = removed_prefixes
    pass

  def run_python(self):
    if not os.path.exists(self.path):
      raise KioskSetupError("%s does not exist." % self.path)
    updated, contents = patch_cmdline(self.path, self.flags, self.removed, self.removed_prefixes)
    if updated:
      write_file(self.path, contents)
      return "%s updated." % self.path
    return "%s is up to date." % self.path

  def explain(self):
    changes = [flag if value is None else "%s=%s" % (flag, value) for flag, value in self.flags.items()]
    changes += ["-" + flag for flag in self.removed]
    changes += ["-%s*" % prefix for prefix in self.removed_prefixes]
    return "Patch %s: %s" % (self.path, " ".join(changes))
  pass


class task_install_authorized_keys(op_task_python_simple):
  """Copy authorized_keys from the boot partition into ~/.ssh."""
  def __init__(self, description, sources, ssh_dir, owner, **kwargs):
    super().__init__(description, **kwargs)
    self.sources = sources
    self.ssh_dir = ssh_dir
    self.owner = owner
    pass

  def run_python(self):
    make_dirs(self.ssh_dir, mode=0o700, owner=self.owner)
    for source in self.sources:
      if os.path.isfile(source):
        target = os.path.join(self.ssh_dir, "authorized_keys")
        shutil.copyfile(source, target)
        os.chmod(target, 0o600)
        os.chown(target, self.owner[0], self.owner[1])
        return "Authorized keys configured from %s" % source
      pass
    klog.warning("No authorized_keys file found in %s" % " or ".join(self.sources))
    return "WARNING: No authorized_keys file found. SSH key authentication will not be available."

  def explain(self):
    return "Copy the first of %s to %s/authorized_keys" % (", ".join(self.sources), self.ssh_dir)
  pass

import unittest
import tempfile
import shutil
import os

from pi_kiosk.lib.kernel_flags import *
from pi_kiosk.config.kiosk_config import KioskConfig


firstboot_cmdline = "console=serial0,115200 console=tty1 root=PARTUUID=4e639091-02 rootfstype=ext4 fsck.repair=yes rootwait quiet init=/usr/lib/raspberrypi-sys-mods/firstboot systemd.run=/boot/firstrun.sh systemd.run_success_action=reboot systemd.unit=kernel-command-line.target\n"

kiosk_cmdline = "console=serial0,115200 console=tty1 root=PARTUUID=4e639091-02 rootfstype=ext4 fsck.repair=yes rootwait quiet init=/usr/lib/raspberrypi-sys-mods/firstboot consoleblank=0 logo.nologo vt.global_cursor_default=0\n"


class Test_kernel_flags(unittest.TestCase):

  def setUp(self):
    self.test_dir = tempfile.mkdtemp()
    self.test_file = os.path.join(self.test_dir, "cmdline.txt")
    with open(self.test_file, "w") as f:
      f.write(firstboot_cmdline)
      pass
    pass

  def tearDown(self):
    shutil.rmtree(self.test_dir)
    pass

  def test_round_trip(self):
    flags = kernel_flags(firstboot_cmdline.strip())
    self.assertEqual(flags.get_cmdline(), firstboot_cmdline.strip())
    self.assertEqual(flags.get_value("root"), "PARTUUID=4e639091-02")
    self.assertEqual(flags.get_value("console"), "serial0,115200")
    self.assertTrue(flags.has_flag("rootwait"))
    pass

  def test_set_tag_value_keeps_order(self):
    flags = kernel_flags("quiet consoleblank=600 rootwait")
    flags.set_tag_value("consoleblank", "0")
    self.assertEqual(flags.get_cmdline(), "quiet consoleblank=0 rootwait")
    pass

  def test_patch_kiosk_and_firstboot(self):
    updated, text = patch_cmdline(self.test_file, KioskConfig.CMDLINE_FLAGS,
                                  removed=('systemd.unit=kernel-command-line.target',),
                                  removed_prefixes=('systemd.run',))
    self.assertTrue(updated)
    self.assertEqual(text, kiosk_cmdline)
    pass

  def test_patch_is_stable(self):
    with open(self.test_file, "w") as f:
      f.write(kiosk_cmdline)
      pass
    updated, text = patch_cmdline(self.test_file, KioskConfig.CMDLINE_FLAGS)
    self.assertFalse(updated)
    self.assertEqual(text, kiosk_cmdline)
    pass

  def test_other_unit_is_kept(self):
    with open(self.test_file, "w") as f:
      f.write("quiet systemd.unit=rescue.target\n")
      pass
    updated, text = patch_cmdline(self.test_file, removed=('systemd.unit=kernel-command-line.target',))
    self.assertFalse(updated)
    self.assertEqual(text, "quiet systemd.unit=rescue.target\n")
    pass

  def test_missing_file(self):
    with self.assertRaises(FileNotFoundError):
      patch_cmdline(os.path.join(self.test_dir, "nope.txt"))
      pass
    pass

  pass

if __name__ == '__main__':
  unittest.main()

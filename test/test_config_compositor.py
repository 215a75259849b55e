import unittest
import tempfile
import shutil
import os
import xml.etree.ElementTree as ET

from pi_kiosk.const import const
from pi_kiosk.config.kiosk_config import KioskConfig
from pi_kiosk.config.config_tasks import task_append_once
from pi_kiosk.setup.config_compositor import *


class Test_config_compositor(unittest.TestCase):

  def setUp(self):
    self.test_dir = tempfile.mkdtemp()
    pass

  def tearDown(self):
    shutil.rmtree(self.test_dir)
    pass

  def test_rc_xml_is_well_formed(self):
    config = KioskConfig(BROWSER='chromium-browser')
    root = ET.fromstring(generate_rc_xml(config).encode('utf-8'))
    self.assertEqual(root.tag, 'labwc_config')
    rules = root.findall('./windowRules/windowRule')
    self.assertEqual(rules[0].get('identifier'), 'chromium-browser*')
    keybind = root.find('./keyboard/keybind')
    self.assertEqual(keybind.get('key'), 'C-A-r')
    # exact process name, cut to 15 characters like the kernel does
    self.assertEqual(keybind.find('action').get('command'), 'pkill -x chromium-browse')
    pass

  def test_autostart_preferred_mode(self):
    autostart = generate_autostart(KioskConfig())
    self.assertIn("wlr-randr --output HDMI-A-1 --preferred >/dev/null 2>&1 &", autostart)
    self.assertIn("wtype", autostart)
    self.assertNotIn("swayidle", autostart)
    pass

  def test_autostart_mode_and_blanking(self):
    autostart = generate_autostart(KioskConfig(MODE='1920x1080@60', BLANK_TIMEOUT=600))
    self.assertIn("wlr-randr --output HDMI-A-1 --mode 1920x1080@60", autostart)
    self.assertIn("swayidle -w timeout 600", autostart)
    self.assertNotIn("wtype", autostart)
    pass

  def test_profile_fallback_once(self):
    profile = os.path.join(self.test_dir, ".profile")
    with open(profile, "w") as f:
      f.write("# ~/.profile\nPATH=$HOME/bin:$PATH")
      pass
    block = profile_snippet_template.format(service=const.compositor_service)
    for _ in range(3):
      task = task_append_once("profile", profile, block, const.profile_marker)
      task.setup()
      task.poll()
      task.teardown()
      self.assertFalse(task.failed)
      pass
    with open(profile) as f:
      contents = f.read()
      pass
    self.assertEqual(contents.count('exec "$HOME/.wayland-session"'), 1)
    self.assertTrue(contents.startswith("# ~/.profile\nPATH=$HOME/bin:$PATH\n"))
    pass

  def test_profile_already_has_labwc(self):
    profile = os.path.join(self.test_dir, ".profile")
    with open(profile, "w") as f:
      f.write("[ \"$(tty)\" = /dev/tty1 ] && exec labwc\n")
      pass
    task = task_append_once("profile", profile,
                            profile_snippet_template.format(service=const.compositor_service),
                            const.profile_marker)
    task.setup()
    task.poll()
    with open(profile) as f:
      self.assertEqual(f.read(), "[ \"$(tty)\" = /dev/tty1 ] && exec labwc\n")
      pass
    pass

  def test_session_launcher(self):
    config = KioskConfig()
    session = wayland_session_template.format(launcher=launcher_script_path(config))
    self.assertIn("exec labwc -s /opt/pi-kiosk/launch-browser.sh", session)
    self.assertIn('export XDG_RUNTIME_DIR="${XDG_RUNTIME_DIR:-/run/user/$(id -u)}"', session)
    pass

  pass

if __name__ == '__main__':
  unittest.main()

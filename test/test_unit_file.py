import unittest

from pi_kiosk.const import const
from pi_kiosk.lib.unit_file import *
from pi_kiosk.lib.user_info import kiosk_user
from pi_kiosk.config.kiosk_config import KioskConfig
from pi_kiosk.setup.install_kiosk_services import *
from pi_kiosk.setup.config_autologin import generate_autologin_dropin


user = kiosk_user('box', 1000, 1000, '/home/box')

example_unit = """# getty drop-in
[Service]
ExecStart=
ExecStart=-/sbin/agetty \\
  --autologin box --noclear %I $TERM
; comment
Type=idle
"""


class Test_unit_file(unittest.TestCase):

  def test_parse(self):
    unit = unit_file.parse(example_unit)
    self.assertEqual(unit.sections, ["Service"])
    self.assertEqual(unit.get_all("Service", "ExecStart"), ["", "-/sbin/agetty --autologin box --noclear %I $TERM"])
    self.assertEqual(unit.get("Service", "Type"), "idle")
    pass

  def test_parse_errors(self):
    with self.assertRaises(UnitFileError):
      unit_file.parse("Description=no section\n")
      pass
    with self.assertRaises(UnitFileError):
      unit_file.parse("[Unit]\nthis is not an assignment\n")
      pass
    pass

  def test_set_replaces(self):
    unit = unit_file("x.service")
    unit.add("Service", "Environment", "A=1")
    unit.add("Service", "Environment", "B=2")
    unit.set("Service", "Environment", "C=3")
    self.assertEqual(unit.get_all("Service", "Environment"), ["C=3"])
    pass

  def test_browser_binds_to_compositor(self):
    config = KioskConfig()
    units = dict((unit.name, unit_file.parse(unit.generate(), unit.name)) for unit in generate_units(config, user))

    browser = units[const.browser_service]
    self.assertIn(const.compositor_service, browser.get_list("Unit", "After"))
    self.assertIn(const.compositor_service, browser.get_list("Unit", "Wants"))
    self.assertEqual(browser.get("Unit", "BindsTo"), const.compositor_service)
    self.assertEqual(browser.get("Service", "User"), "box")
    self.assertEqual(browser.get("Service", "ExecStart"), "/opt/pi-kiosk/launch-browser.sh")
    self.assertEqual(browser.get("Service", "Restart"), "always")

    compositor = units[const.compositor_service]
    self.assertEqual(compositor.get("Service", "TTYPath"), "/dev/tty7")
    self.assertEqual(compositor.get("Install", "WantedBy"), "graphical.target")
    self.assertIn("XDG_RUNTIME_DIR=/run/user/1000", compositor.get_all("Service", "Environment"))

    timer = units[const.restart_timer]
    self.assertEqual(timer.get("Timer", "Unit"), const.restart_service)
    self.assertEqual(timer.get("Timer", "OnCalendar"), "*-*-* 04:00:00")

    restart = units[const.restart_service]
    self.assertEqual(restart.get("Service", "ExecStart"), "/bin/systemctl try-restart %s" % const.browser_service)
    pass

  def test_generate_is_stable(self):
    config = KioskConfig()
    for unit in generate_units(config, user):
      text = unit.generate()
      self.assertEqual(unit_file.parse(text).generate(), text)
      pass
    pass

  def test_autologin_dropin(self):
    dropin = unit_file.parse(generate_autologin_dropin("box"))
    self.assertEqual(dropin.get_all("Service", "ExecStart"), ["", "-/sbin/agetty --autologin box --noclear %I $TERM"])
    pass

  def test_launch_script_quotes_url(self):
    config = KioskConfig(URL="https://example.com/?a=1&b=2", WAIT_FOR_URL=True)
    script = generate_launch_browser_script(config)
    self.assertIn("'https://example.com/?a=1&b=2'", script)
    self.assertIn("--wait-for-url", script)
    self.assertTrue(script.startswith("#!/bin/sh\n"))
    pass

  pass

if __name__ == '__main__':
  unittest.main()

import unittest
import tempfile
import shutil
import os
from unittest import mock

from pi_kiosk.lib.hostname import *
from pi_kiosk.lib.network_manager import *
from pi_kiosk.lib.user_info import kiosk_user
from pi_kiosk.config.kiosk_config import KioskConfig
from pi_kiosk.setup import plan_context
from pi_kiosk.setup.firstboot import *
from pi_kiosk.setup.install_kiosk_services import task_enable_services


class Test_hostname(unittest.TestCase):

  def setUp(self):
    self.etc_dir = tempfile.mkdtemp()
    pass

  def tearDown(self):
    shutil.rmtree(self.etc_dir)
    pass

  def test_generate_hostname(self):
    names = set()
    for _ in range(20):
      name = generate_hostname()
      self.assertRegex(name, r"^box-[a-z0-9]{4}-[a-z0-9]{4}$")
      names.add(name)
      pass
    self.assertGreater(len(names), 1)
    self.assertTrue(generate_hostname("kiosk").startswith("kiosk-"))
    pass

  def test_set_hostname_files(self):
    with open(os.path.join(self.etc_dir, "hostname"), "w") as f:
      f.write("raspberrypi\n")
      pass
    with open(os.path.join(self.etc_dir, "hosts"), "w") as f:
      f.write("127.0.0.1\tlocalhost\n::1\t\tlocalhost ip6-localhost ip6-loopback\n\n127.0.1.1\t\traspberrypi\n")
      pass
    self.assertEqual(set_hostname_files(self.etc_dir, "box-abcd-1234"), "raspberrypi")
    with open(os.path.join(self.etc_dir, "hostname")) as f:
      self.assertEqual(f.read(), "box-abcd-1234\n")
      pass
    with open(os.path.join(self.etc_dir, "hosts")) as f:
      self.assertEqual(f.read(), "127.0.0.1\tlocalhost\n::1\t\tlocalhost ip6-localhost ip6-loopback\n\n127.0.1.1\tbox-abcd-1234\n")
      pass
    pass

  def test_hosts_without_entry(self):
    with open(os.path.join(self.etc_dir, "hosts"), "w") as f:
      f.write("127.0.0.1\tlocalhost\n")
      pass
    self.assertEqual(set_hostname_files(self.etc_dir, "box-abcd-1234"), "")
    with open(os.path.join(self.etc_dir, "hosts")) as f:
      self.assertEqual(f.read(), "127.0.0.1\tlocalhost\n127.0.1.1\tbox-abcd-1234\n")
      pass
    pass

  pass


class Test_wifi(unittest.TestCase):

  def test_wpa_supplicant_passphrase(self):
    conf = generate_wpa_supplicant_conf("kiosk-net", "secret passphrase", "ID")
    self.assertIn("country=ID\n", conf)
    self.assertIn('ssid="kiosk-net"', conf)
    self.assertIn('psk="secret passphrase"', conf)
    pass

  def test_wpa_supplicant_hashed_psk(self):
    psk = "55f89fe04c698a12910b1542131d718245b390febaac1bbf27f411598f85f00d"
    conf = generate_wpa_supplicant_conf("kiosk-net", psk, "ID")
    self.assertIn("psk=%s\n" % psk, conf)
    pass

  def test_wpa_supplicant_open(self):
    self.assertIn("key_mgmt=NONE", generate_wpa_supplicant_conf("cafe", None, "US"))
    pass

  def test_nmcli_connection(self):
    task = task_nmcli_wifi("wifi", "kiosk-net", "secret")
    with mock.patch('pi_kiosk.setup.firstboot.list_connections', return_value=['Wired connection 1']):
      argvs = task.plan_commands()
      pass
    self.assertEqual(argvs, [wifi_connection_argv("kiosk-net", "kiosk-net", "secret")])
    self.assertIn('wifi-sec.psk', argvs[0])
    self.assertNotIn('secret', task.format_argv(argvs[0]))
    with mock.patch('pi_kiosk.setup.firstboot.list_connections', return_value=['kiosk-net']):
      self.assertEqual(task.plan_commands(), [])
      pass
    pass

  pass


class Test_firstboot_plan(unittest.TestCase):
  """The running system, with and without Raspberry Pi OS's imager_custom."""

  def setUp(self):
    self.config = KioskConfig(ROOT='/', WIFI_SSID="kiosk-net", WIFI_PSK="secret-passphrase",
                              WIFI_COUNTRY="ID", TIMEZONE="Asia/Jakarta", KEYMAP="us")
    self.context = plan_context(self.config, kiosk_user('kiosk', 1000, 1000, '/home/kiosk'))
    pass

  def test_imager_custom(self):
    with mock.patch('pi_kiosk.setup.firstboot.has_imager_custom', return_value=True):
      tasks = hostname_tasks(self.context) + ssh_tasks(self.context) + wifi_tasks(self.context) + \
              timezone_tasks(self.context) + keymap_tasks(self.context)
      pass
    commands = [task.argvs[0][1:] for task in tasks if isinstance(task, task_imager_custom)]
    self.assertEqual(commands[0][0], 'set_hostname')
    self.assertRegex(commands[0][1], r"^box-[a-z0-9]{4}-[a-z0-9]{4}$")
    self.assertEqual(commands[1:], [['enable_ssh'],
                                    ['set_wlan', 'kiosk-net', 'secret-passphrase', 'ID'],
                                    ['set_timezone', 'Asia/Jakarta'],
                                    ['set_keymap', 'us']])
    wifi = [task for task in tasks if task.description == "Configure Wi-Fi"][0]
    self.assertNotIn('secret-passphrase', wifi.explain())
    self.assertNotIn('secret-passphrase', wifi.format_argv(wifi.argvs[0]))
    pass

  def test_without_imager_custom(self):
    with mock.patch('pi_kiosk.setup.firstboot.has_imager_custom', return_value=False), \
         mock.patch('pi_kiosk.setup.firstboot.is_network_manager_on', return_value=False):
      wifi = wifi_tasks(self.context)
      keymap = keymap_tasks(self.context)
      timezone = timezone_tasks(self.context)
      pass
    self.assertEqual([task.description for task in wifi],
                     ["Write wpa_supplicant.conf", "Unblock Wi-Fi", "Clear saved Wi-Fi block"])
    self.assertEqual(wifi[2].state_dir, '/var/lib/systemd/rfkill')
    self.assertEqual(keymap[0].path, '/etc/default/keyboard')
    self.assertEqual(keymap[1].argv, ['dpkg-reconfigure', '-f', 'noninteractive', 'keyboard-configuration'])
    self.assertEqual(timezone[0].argv, ['timedatectl', 'set-timezone', 'Asia/Jakarta'])
    pass

  def test_no_keymap(self):
    self.config.KEYMAP = None
    self.assertEqual(keymap_tasks(self.context), [])
    pass

  def test_provision_service_needs_script(self):
    with mock.patch('pi_kiosk.setup.firstboot.find_provision_script', return_value=None):
      self.assertEqual(provision_service_tasks(self.context), [])
      pass
    with mock.patch('pi_kiosk.setup.firstboot.find_provision_script', return_value='/boot/firstboot-provision.sh'):
      write, enable = provision_service_tasks(self.context)
      pass
    self.assertEqual(write.path, '/etc/systemd/system/firstboot-provision.service')
    self.assertIn("ExecStart=/boot/firstboot-provision.sh\n", write.contents)
    self.assertIn("StandardOutput=append:/boot/firstboot_setup.log\n", write.contents)
    self.assertIsInstance(enable, task_enable_services)
    # the default target belongs to the kiosk services
    self.assertEqual(enable.plan_commands(), [['systemctl', 'daemon-reload'],
                                              ['systemctl', 'enable', 'firstboot-provision.service']])
    pass

  pass


class Test_rfkill_state(unittest.TestCase):

  def setUp(self):
    self.state_dir = tempfile.mkdtemp()
    pass

  def tearDown(self):
    shutil.rmtree(self.state_dir)
    pass

  def test_only_wlan_is_cleared(self):
    for name, state in [("platform-3f300000.mmcnr:wlan", "1\n"), ("platform-soc:bluetooth", "1\n")]:
      with open(os.path.join(self.state_dir, name), "w") as f:
        f.write(state)
        pass
      pass
    task = task_reset_rfkill_state("rfkill", self.state_dir)
    self.assertIn("Cleared", task.run_python())
    with open(os.path.join(self.state_dir, "platform-3f300000.mmcnr:wlan")) as f:
      self.assertEqual(f.read(), "0\n")
      pass
    with open(os.path.join(self.state_dir, "platform-soc:bluetooth")) as f:
      self.assertEqual(f.read(), "1\n")
      pass
    self.assertIn("No saved Wi-Fi block", task.run_python())
    pass

  pass

if __name__ == '__main__':
  unittest.main()

import unittest
import tempfile
import shutil
import os
from unittest import mock

from pi_kiosk.lib.apt import get_debian_codename
from pi_kiosk.setup.install_packages import *


class Test_install_packages(unittest.TestCase):

  def setUp(self):
    self.test_dir = tempfile.mkdtemp()
    pass

  def tearDown(self):
    shutil.rmtree(self.test_dir)
    pass

  def test_package_plan(self):
    bookworm = get_package_plan('bookworm')
    self.assertIn('labwc', bookworm)
    self.assertIn('seatd', bookworm)
    self.assertIn('chromium-browser', bookworm)
    self.assertNotIn('chromium', bookworm)

    self.assertIn('chromium', get_package_plan('trixie'))
    self.assertIn('chromium', get_package_plan(None))
    self.assertIn('chromium', get_package_plan('forky'))
    pass

  def test_codename(self):
    os_release = os.path.join(self.test_dir, "os-release")
    with open(os_release, "w") as f:
      f.write('PRETTY_NAME="Debian GNU/Linux 12 (bookworm)"\nVERSION_ID="12"\nVERSION_CODENAME=bookworm\n')
      pass
    self.assertEqual(get_debian_codename(os_release), 'bookworm')
    self.assertIsNone(get_debian_codename(os.path.join(self.test_dir, "nope")))
    pass

  def test_only_missing_packages(self):
    task = task_install_packages("install", ['labwc', 'seatd', 'wtype'])
    with mock.patch('pi_kiosk.setup.install_packages.list_installed_packages',
                    return_value={'labwc': '0.7.2-1', 'seatd': '0.7.0-3'}):
      argvs = task.plan_commands()
      pass
    self.assertEqual(argvs, [['apt-get', 'update'],
                             ['apt-get', 'install', '-y', '--no-install-recommends', 'wtype']])
    self.assertEqual(task.env['DEBIAN_FRONTEND'], 'noninteractive')
    pass

  def test_all_installed(self):
    task = task_install_packages("install", ['labwc'])
    with mock.patch('pi_kiosk.setup.install_packages.list_installed_packages', return_value={'labwc': '0.7.2-1'}):
      self.assertEqual(task.plan_commands(), [])
      pass
    pass

  pass

if __name__ == '__main__':
  unittest.main()

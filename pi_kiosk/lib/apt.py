#
# Debian packages
#
import re
import subprocess


def get_debian_codename(os_release='/etc/os-release'):
  """bookworm, trixie, ... or None"""
  codename_re = re.compile(r'^VERSION_CODENAME\s*=\s*"?([\w\-]+)"?')
  try:
    with open(os_release) as os_release_fd:
      for line in os_release_fd.readlines():
        result = codename_re.search(line)
        if result:
          return result.group(1)
        pass
      pass
    pass
  except FileNotFoundError:
    pass
  return None


def list_installed_packages():
  """Lists and returns installed packages.
  Returns dict of package name to version, not list.
  """
  installed_packages = {}

  dpkg_query = subprocess.run(['dpkg-query', '-W', '-f', '${Package} ${Status} ${Version}\n'],
                              stdout=subprocess.PIPE, stderr=subprocess.PIPE)
  for pkg_line in dpkg_query.stdout.decode('iso-8859-1').splitlines():
    fields = pkg_line.strip().split()
    # "labwc install ok installed 0.7.2-1"
    if len(fields) >= 5 and fields[3] == 'installed':
      installed_packages[fields[0].split(':')[0]] = fields[4]
      pass
    pass
  return installed_packages


def get_package_list(package_list, release_version) -> list:
  return package_list.get(None, []) + package_list.get(release_version, [])

import re, secrets, string

from .util import read_file, write_file

_alphabet = string.ascii_lowercase + string.digits


def random_alphanumeric(length):
  return "".join(secrets.choice(_alphabet) for _ in range(length))


def generate_hostname(prefix="box"):
  """box-XXXX-XXXX with lowercase letters and digits"""
  return "%s-%s-%s" % (prefix, random_alphanumeric(4), random_alphanumeric(4))


def set_hostname_files(etc_dir, new_hostname):
  """Writes /etc/hostname and points the 127.0.1.1 entry of /etc/hosts at the new name.
  Returns the old hostname.
  """
  hostname_file = etc_dir + "/hostname"
  old_hostname = (read_file(hostname_file) or "").strip()
  write_file(hostname_file, "%s\n" % new_hostname)

  # Set up the /etc/hosts file
  hosts_file = etc_dir + "/hosts"
  hosts = read_file(hosts_file)
  if hosts is None:
    hosts = "127.0.0.1\tlocalhost\n"
    pass

  this_host = re.compile(r"^127\.0\.1\.1\s+.*$")
  lines = hosts.splitlines()
  replaced = False
  for i_line in range(len(lines)):
    if this_host.match(lines[i_line]):
      lines[i_line] = "127.0.1.1\t%s" % new_hostname
      replaced = True
      pass
    pass
  if not replaced:
    lines.append("127.0.1.1\t%s" % new_hostname)
    pass
  write_file(hosts_file, "\n".join(lines) + "\n")
  return old_hostname


from .util import run_quietly


def is_network_manager_on():
  returncode, out = run_quietly(['systemctl', 'is-active', 'NetworkManager.service'])
  # Bookworm and later run NetworkManager. Older images use wpa_supplicant.conf
  return out.strip() == 'active'


def list_connections():
  returncode, out = run_quietly(['nmcli', '-t', '-f', 'NAME', 'connection', 'show'])
  return [line.strip() for line in out.splitlines() if line.strip()]


def wifi_connection_argv(name, ssid, psk, ifname='wlan0'):
  """nmcli command line that creates a persistent, auto-connecting wifi profile."""
  argv = ['nmcli', 'connection', 'add', 'type', 'wifi', 'con-name', name,
          'ifname', ifname, 'ssid', ssid, 'connection.autoconnect', 'yes']
  if psk:
    argv = argv + ['wifi-sec.key-mgmt', 'wpa-psk', 'wifi-sec.psk', psk]
    pass
  return argv


wpa_supplicant_template = '''country={country}
ctrl_interface=DIR=/var/run/wpa_supplicant GROUP=netdev
ap_scan=1

update_config=1
network={{
    ssid="{ssid}"
    {psk_line}
}}
'''


def generate_wpa_supplicant_conf(ssid, psk, country):
  # 64 hex digits is a pre-computed PSK and is not quoted
  if psk is None:
    psk_line = 'key_mgmt=NONE'
  elif len(psk) == 64 and all(c in '0123456789abcdefABCDEF' for c in psk):
    psk_line = 'psk=%s' % psk
  else:
    psk_line = 'psk="%s"' % psk
    pass
  return wpa_supplicant_template.format(country=country, ssid=ssid, psk_line=psk_line)


if __name__ == "__main__":
    print( "Network manager: {}".format( "on" if is_network_manager_on() else "off") )
    pass

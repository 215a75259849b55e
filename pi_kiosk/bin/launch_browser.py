#!/usr/bin/env python3
#
# This is run by chromium-kiosk.service as the kiosk user.
#
# Waits for the compositor's Wayland socket, then runs the browser. A browser
# that dies right after the start is a crash and is retried a few times with a
# fixed backoff. A browser that ran for a while is left to systemd: the
# launcher exits 0 and Restart=always starts it again. Only a socket timeout or
# running out of retries is a non-zero exit.
#
import os, sys, subprocess, shutil, time, json, signal
from argparse import ArgumentParser

from ..const import const
from ..lib.util import get_kiosk_logger, setup_kiosk_logger
from ..lib.url_probe import wait_for_url
from ..config.kiosk_config import KioskConfig

klog = get_kiosk_logger()

browser_flags = [
  '--kiosk',
  '--noerrdialogs',
  '--disable-infobars',
  '--no-first-run',
  '--no-default-browser-check',
  '--disable-session-crashed-bubble',
  '--disable-features=TranslateUI',
  '--check-for-update-interval=31536000',
  '--password-store=basic',
  '--ozone-platform=wayland',
  '--enable-features=OverlayScrollbar',
]

browser_candidates = ['chromium', 'chromium-browser']


def find_browser(preferred):
  """Debian calls it chromium, Raspberry Pi OS bookworm chromium-browser."""
  for candidate in [preferred] + [c for c in browser_candidates if c != preferred]:
    path = shutil.which(candidate)
    if path:
      return path
    pass
  return preferred


def wayland_socket_path(environ=None):
  if environ is None:
    environ = os.environ
    pass
  runtime_dir = environ.get(const.XDG_RUNTIME_DIR) or "/run/user/%d" % os.getuid()
  return os.path.join(runtime_dir, environ.get(const.WAYLAND_DISPLAY) or KioskConfig.WAYLAND_DISPLAY)


def mark_profile_clean(profile_dir):
  """Chromium shows a "restore pages" bubble when the last run crashed. Pretend it did not."""
  pref_file = os.path.join(profile_dir, "Default", "Preferences")
  if not os.path.exists(pref_file):
    return False
  try:
    with open(pref_file) as f:
      prefs = json.load(f)
  except (ValueError, OSError) as exc:
    klog.warning("Cannot read %s: %s" % (pref_file, exc))
    return False
  profile = prefs.setdefault("profile", {})
  if profile.get("exited_cleanly") is True and profile.get("exit_type") == "Normal":
    return False
  profile["exited_cleanly"] = True
  profile["exit_type"] = "Normal"
  with open(pref_file, "w") as f:
    json.dump(prefs, f)
    pass
  return True


def browser_process_name(browser):
  """What the kernel calls the browser process. comm is cut at 15 characters."""
  return os.path.basename(browser)[:15]


def _read_proc(pid, name, mode="r"):
  try:
    with open("/proc/%s/%s" % (pid, name), mode) as f:
      return f.read()
  except OSError:
    return None


def find_browser_pids(browser, uid=None, exclude=()):
  """Pids of the browser processes.

  A process is a browser when its name, or the base name of its argv[0], is the
  browser's. The command line arguments are not looked at, so the launcher
  itself (python3 ... --browser chromium) is never one.

  :param uid: only processes owned by this user. None for every user.
  :param exclude: pids left out of the result
  """
  name = browser_process_name(browser)
  pids = []
  for entry in os.listdir("/proc"):
    if not entry.isdigit() or int(entry) in exclude:
      continue
    if uid is not None:
      try:
        if os.stat("/proc/" + entry).st_uid != uid:
          continue
      except OSError:
        continue
      pass
    comm = _read_proc(entry, "comm")
    cmdline = _read_proc(entry, "cmdline", "rb")
    argv0 = cmdline.split(b"\0")[0].decode('utf-8', errors='replace') if cmdline else ""
    if (comm is not None and comm.strip() == name) or (argv0 and os.path.basename(argv0) == os.path.basename(browser)):
      pids.append(int(entry))
      pass
    pass
  return pids


def kill_stale_browser(browser):
  """SIGTERM to the kiosk user's leftover browser processes. Never to this process or its parent."""
  pids = find_browser_pids(browser, uid=os.getuid(), exclude=(os.getpid(), os.getppid()))
  for pid in pids:
    try:
      os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
      continue
    except PermissionError as exc:
      klog.warning("Cannot stop %d: %s" % (pid, exc))
      continue
    klog.info("Stopped stale browser process %d" % pid)
    pass
  return pids


class browser_supervisor:
  """Bounded linear retry of the browser process.

  spawn, sleep, clock and socket_exists are replaceable so that the loop can
  run without a compositor.
  """
  def __init__(self, argv, socket_path,
               socket_timeout=KioskConfig.SOCKET_TIMEOUT,
               poll_interval=KioskConfig.POLL_INTERVAL,
               max_retries=KioskConfig.MAX_RETRIES,
               grace_period=KioskConfig.GRACE_PERIOD,
               backoff=KioskConfig.BACKOFF,
               spawn=subprocess.Popen,
               sleep=time.sleep,
               clock=time.monotonic,
               socket_exists=os.path.exists,
               before_launch=None):
    self.argv = argv
    self.socket_path = socket_path
    self.socket_timeout = socket_timeout
    self.poll_interval = poll_interval
    self.max_retries = max(1, max_retries)
    self.grace_period = grace_period
    self.backoff = backoff
    self.spawn = spawn
    self.sleep = sleep
    self.clock = clock
    self.socket_exists = socket_exists
    self.before_launch = before_launch
    self.launches = 0
    pass

  def wait_for_socket(self):
    waited = 0
    while not self.socket_exists(self.socket_path):
      if waited >= self.socket_timeout:
        return False
      self.sleep(self.poll_interval)
      waited += self.poll_interval
      pass
    return True

  def run(self):
    klog.info("Waiting for %s" % self.socket_path)
    if not self.wait_for_socket():
      klog.error("%s did not appear in %d seconds." % (self.socket_path, self.socket_timeout))
      return 1

    while self.launches < self.max_retries:
      self.launches += 1
      if self.before_launch:
        self.before_launch()
        pass
      klog.info("Launch %d/%d: %s" % (self.launches, self.max_retries, " ".join(self.argv)))
      started = self.clock()
      process = self.spawn(self.argv)
      returncode = process.wait()
      elapsed = self.clock() - started

      if elapsed >= self.grace_period:
        # Not a start-up crash. systemd starts the launcher again with fresh retries.
        klog.info("Browser exited with %d after %d seconds." % (returncode, elapsed))
        return 0

      klog.warning("Browser exited with %d after %.1f seconds. Treating it as a crash." % (returncode, elapsed))
      if self.launches < self.max_retries:
        self.sleep(self.backoff)
        pass
      pass

    klog.error("Browser crashed %d times. Giving up." % self.launches)
    return 1
  pass


def main(args=None, environ=None):
  if environ is None:
    environ = os.environ
    pass
  parser = ArgumentParser(description='Run the kiosk browser once the compositor is up')
  parser.add_argument("--url", dest="url", default=environ.get(const.KIOSK_URL, KioskConfig.URL))
  parser.add_argument("--browser", dest="browser", default=environ.get(const.KIOSK_BROWSER, KioskConfig.BROWSER))
  parser.add_argument("--socket-timeout", type=int, dest="socket_timeout", default=KioskConfig.SOCKET_TIMEOUT)
  parser.add_argument("--poll-interval", type=int, dest="poll_interval", default=KioskConfig.POLL_INTERVAL)
  parser.add_argument("--max-retries", type=int, dest="max_retries", default=KioskConfig.MAX_RETRIES)
  parser.add_argument("--grace-period", type=int, dest="grace_period", default=KioskConfig.GRACE_PERIOD)
  parser.add_argument("--backoff", type=int, dest="backoff", default=KioskConfig.BACKOFF)
  parser.add_argument("--wait-for-url", dest="wait_for_url", action='store_true')
  parser.add_argument("--url-timeout", type=int, dest="url_timeout", default=KioskConfig.URL_TIMEOUT)
  arguments = parser.parse_args(args)

  setup_kiosk_logger(klog, stream=sys.stderr)

  browser = find_browser(arguments.browser)
  socket_path = wayland_socket_path(environ)

  def before_launch():
    kill_stale_browser(browser)
    mark_profile_clean(os.path.join(os.path.expanduser("~"), ".config", os.path.basename(browser)))
    pass

  supervisor = browser_supervisor([browser] + browser_flags + [arguments.url], socket_path,
                                  socket_timeout=arguments.socket_timeout,
                                  poll_interval=arguments.poll_interval,
                                  max_retries=arguments.max_retries,
                                  grace_period=arguments.grace_period,
                                  backoff=arguments.backoff,
                                  before_launch=before_launch)

  if arguments.wait_for_url:
    # Only after the compositor is up. The browser shows its own error page if the URL stays down.
    if supervisor.wait_for_socket() and not wait_for_url(arguments.url, timeout=arguments.url_timeout):
      klog.warning("%s is not reachable. Launching anyway." % arguments.url)
      pass
    pass

  return supervisor.run()


if __name__ == "__main__":
  sys.exit(main())
  pass

#
# Kiosk URL reachability
#
# The kiosk page may live on the network. Before the browser shows an error
# page, it is nicer to wait a little for the network to come up.
#
import asyncio
import time

import aiohttp

from .util import get_kiosk_logger

klog = get_kiosk_logger()


async def probe_url(url, timeout=3.0):
  """Returns the HTTP status of url, or None when nothing answers."""
  if not url.startswith(('http://', 'https://')):
    # file:// and friends do not need the network
    return 200
  client_timeout = aiohttp.ClientTimeout(total=timeout)
  try:
    async with aiohttp.ClientSession(timeout=client_timeout) as session:
      async with session.get(url, allow_redirects=True) as response:
        return response.status
  except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
    klog.debug("probe %s: %s" % (url, repr(exc)))
    return None


async def wait_for_url_async(url, timeout=60, interval=2.0):
  """Polls url until it answers or timeout seconds pass. Returns True when it answered."""
  deadline = time.monotonic() + timeout
  while True:
    status = await probe_url(url, timeout=min(interval + 1.0, 5.0))
    if status is not None:
      return True
    if time.monotonic() + interval > deadline:
      return False
    await asyncio.sleep(interval)
    pass
  pass


def is_url_reachable(url, timeout=3.0):
  return asyncio.run(probe_url(url, timeout=timeout)) is not None


def wait_for_url(url, timeout=60, interval=2.0):
  return asyncio.run(wait_for_url_async(url, timeout=timeout, interval=interval))

import unittest
import socket

from aiohttp import web
from aiohttp.test_utils import TestServer

from pi_kiosk.lib.url_probe import *


def unused_port():
  with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
    s.bind(('127.0.0.1', 0))
    return s.getsockname()[1]
  pass


async def hello(request):
  return web.Response(text="kiosk")


async def missing(request):
  raise web.HTTPNotFound()


class Test_url_probe(unittest.IsolatedAsyncioTestCase):

  async def asyncSetUp(self):
    app = web.Application()
    app.router.add_get('/', hello)
    app.router.add_get('/missing', missing)
    self.server = TestServer(app)
    await self.server.start_server()
    pass

  async def asyncTearDown(self):
    await self.server.close()
    pass

  async def test_reachable(self):
    self.assertEqual(await probe_url(str(self.server.make_url('/'))), 200)
    pass

  async def test_any_answer_counts(self):
    self.assertEqual(await probe_url(str(self.server.make_url('/missing'))), 404)
    self.assertTrue(await wait_for_url_async(str(self.server.make_url('/missing')), timeout=1))
    pass

  async def test_unreachable(self):
    url = "http://127.0.0.1:%d/" % unused_port()
    self.assertIsNone(await probe_url(url, timeout=1.0))
    self.assertFalse(await wait_for_url_async(url, timeout=0.2, interval=0.1))
    pass

  async def test_local_file(self):
    self.assertEqual(await probe_url("file:///opt/pi-kiosk/index.html"), 200)
    pass

  pass


class Test_url_probe_sync(unittest.TestCase):

  def test_unreachable(self):
    self.assertFalse(is_url_reachable("http://127.0.0.1:%d/" % unused_port(), timeout=1.0))
    self.assertFalse(wait_for_url("http://127.0.0.1:%d/" % unused_port(), timeout=0.2, interval=0.1))
    pass

  pass

if __name__ == '__main__':
  unittest.main()

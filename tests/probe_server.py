"""Shared fixture: a live probe server plus an API client pointed at it."""

import unittest

from aiohttp.test_utils import TestServer

from client.api import Endpoints, SpeedtestAPI
from server.app import create_app


class LiveServerTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.server = TestServer(create_app())
        await self.server.start_server()
        self.endpoints = Endpoints.from_base(str(self.server.make_url("/api")))
        self.api = SpeedtestAPI(self.endpoints)
        await self.api.__aenter__()

    async def asyncTearDown(self):
        await self.api.__aexit__(None, None, None)
        await self.server.close()

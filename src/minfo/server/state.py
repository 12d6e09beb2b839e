"""Typed application keys for state stored on the aiohttp Application."""

from aiohttp import web

from minfo.config.models import MinfoConfig
from minfo.media.resolver import SourceResolver

CONFIG_KEY = web.AppKey("config", MinfoConfig)
RESOLVER_KEY = web.AppKey("resolver", SourceResolver)
STARTED_AT_KEY = web.AppKey("started_at", float)

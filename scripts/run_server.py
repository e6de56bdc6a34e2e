#!/usr/bin/env python3
"""Entry point for the Frictionless matching API."""
import sys
import os
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import uvicorn
from frictionless.api import create_app
from frictionless.config import API_HOST, API_PORT, DB_PATH
from frictionless.db import ProfileStore

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    store = ProfileStore(DB_PATH)
    uvicorn.run(create_app(store), host=API_HOST, port=API_PORT)

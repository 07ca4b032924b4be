#!/usr/bin/env python3
"""
Run script for the LangAssist backend
"""
import uvicorn

from langassist.config.settings import get_settings
from langassist.main import app

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)

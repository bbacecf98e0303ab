#!/usr/bin/env python3
"""
Setup script for the exec-insights backend

Installs both import roots that live under backend/:
- shared: settings, models, exceptions, logging, sheet grid parsing
- insights: table inference, column roles, sheet scoring, forecasting service
"""

from setuptools import find_namespace_packages, setup

setup(
    name="exec-insights",
    version="0.1.0",
    package_dir={"": "backend"},
    packages=find_namespace_packages(
        where="backend",
        include=["shared", "shared.*", "insights", "insights.*"],
        exclude=["*.tests", "*.tests.*"],
    ),
    python_requires=">=3.9",
    install_requires=[
        # 🚀 Web Framework - MSA Core Stack
        "fastapi>=0.104.1",
        "uvicorn[standard]>=0.24.0",

        # 📋 Data Validation & Settings
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "python-dotenv>=1.0.0",

        # 🌐 HTTP & File Handling
        "python-multipart>=0.0.6",

        # 📊 Data Processing
        "openpyxl>=3.1.2",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.21",
        ],
    },
)

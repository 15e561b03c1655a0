from setuptools import setup, find_namespace_packages

setup(
    name="event-analyzer-backend",
    version="1.0.0",
    packages=find_namespace_packages(include=["app", "app.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy[asyncio]>=2.0",
        "aiosqlite",
        "pydantic>=2",
        "pydantic-settings",
        "python-json-logger",
        "python-dateutil",
        "httpx"
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio"
        ]
    },
)

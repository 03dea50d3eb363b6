# setup.py
from setuptools import setup, find_packages

setup(
    name="image_scout",
    version="0.1.0",
    description="Асинхронный загрузчик изображений с сайтов ImageScout",
    packages=find_packages(exclude=["tests", "tests.*"]),  # найдёт image_scout и image_scout.crawler
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "image-scout=image_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)

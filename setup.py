# setup.py
from setuptools import setup, find_packages

setup(
    name="tab_harvest",
    version="0.1.0",
    description="Сбор главных изображений открытых вкладок в один ZIP-архив",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"tab_harvest": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "Jinja2>=3.1",
        "pillow>=10.0",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "tab-harvest=tab_harvest.cli:cli",
        ],
    },
    python_requires=">=3.11",
)

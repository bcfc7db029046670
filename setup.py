import os

from setuptools import setup, find_packages

setup(
    name="jobboard",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "fastapi>=0.100.0",
        "uvicorn>=0.15.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=0.19.0",
        "python-multipart>=0.0.7",
        "aiosqlite>=0.17.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "httpx>=0.24.0",
        ],
    },
    python_requires=">=3.9",
    description="A job board backend for posting and browsing job listings",
    long_description=open("README.md").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    entry_points={
        "console_scripts": [
            "job-board=jobboard.services.jobs.main:main",
        ],
    },
)

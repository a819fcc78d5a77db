import os.path

from setuptools import find_packages, setup


def read(fname):
    path = os.path.join(os.path.dirname(__file__), fname)
    with open(path, "r") as rfile:
        return rfile.read()


metadata = {}
exec(read("src/rested/__about__.py"), metadata)


setup(
    name="rested",
    version=metadata["__version__"],
    description=metadata["__description__"],
    license="MIT",
    long_description=read("README.rst") + "\n\n" + read("HISTORY.rst"),
    author=metadata["__author__"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    install_requires=[
        "urllib3>=1.26",
    ],
    extras_require={
        "aiohttp": ["aiohttp>=3.8"],
        "requests": ["requests>=2.25"],
        "httpx": ["httpx>=0.23"],
        "test": [
            "pytest>=7",
            "pytest-mock>=3",
            "pytest-httpbin>=2",
            "requests>=2.25",
        ],
    },
    keywords=[
        "api-wrapper",
        "http",
        "rest",
        "hypermedia",
        "async",
    ],
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages("src"),
)

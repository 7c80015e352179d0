from setuptools import setup, find_packages
setup(
    name="fs_kv_cache",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=["msgpack>=1.0", "xxhash"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.9",
)

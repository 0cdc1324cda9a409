from setuptools import setup, find_packages

setup(
    name="retry-simulator",
    version="0.1.0",
    description="Discrete event simulation of retrying clients against lossy, queue-bounded servers",
    author="adamfilli",
    packages=find_packages(include=["retrysim", "retrysim.*"]),
    install_requires=[
        "matplotlib",
        "numpy",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    python_requires=">=3.10",
)

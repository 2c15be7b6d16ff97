"""Setup configuration for pymotorig package."""

from setuptools import setup, find_packages

install_requires = [
    'numpy>=1.20.0',
    'pymunk>=6.0.0',
    'pygame>=2.1.0',
]

dev_requires = [
    'pytest>=7.0.0',
    'pytest-cov>=3.0.0',
]

setup(
    name="pymotorig",
    version="0.1.0",
    author="pymotorig contributors",
    description="Parametric 2D motorcycle suspension rigs for pymunk simulation",
    packages=find_packages(exclude=["tests", "tests.*", "examples", "examples.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering",
        "Topic :: Scientific/Engineering :: Physics",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require={
        "dev": dev_requires,
    },
    keywords="motorcycle suspension geometry physics simulation pymunk",
)

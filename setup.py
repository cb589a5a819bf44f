from setuptools import find_packages, setup

with open("README.md", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="pyfastpix",
    version="0.0.1",
    description="GPU pixelization of adaptive-mesh cell data",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["pyfastpix", "pyfastpix.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Visualization",
        "Topic :: Scientific/Engineering :: Astronomy",
    ],
    python_requires=">=3.9",
    install_requires=[
        "taichi>=1.4.0",
        "numpy>=1.20.0",
        "click>=7.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0",
            "pytest-cov",
        ],
        "dev": [
            "pytest>=6.0",
            "pytest-cov",
            "black",
            "flake8",
        ],
    },
    keywords="pixelization rasterization AMR visualization GPU taichi",
    entry_points={
        "console_scripts": [
            "pfp-pixelize=pyfastpix.cli.pixelize_commands:pixelize",
            "pfp-slice=pyfastpix.cli.pixelize_commands:slice_cells",
        ],
    },
)

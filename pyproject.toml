[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "p563"
version = "0.1.0"
description = "Building blocks of single-ended speech quality analysis: FFT, LPC, filtering, noise floor and segmental SNR estimation"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["speech", "quality", "lpc", "snr", "noise", "dsp", "fft"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Telecommunications Industry",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["p563"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

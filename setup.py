"""
react2shell-check - CVE-2025-55182 (React2Shell) Scanner
Finds React installations vulnerable to CVE-2025-55182 and updates them

Scans:
- The current user's home directory
- Docker data, /opt, /srv, /usr/local and other homes when run as root
"""

from setuptools import setup
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding='utf-8')

# Read requirements
requirements = (this_directory / "requirements.txt").read_text(encoding='utf-8').splitlines()

setup(
    name="react2shell-check",
    version="1.0.0",
    description="Scanner and interactive updater for React CVE-2025-55182 (React2Shell)",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={'': 'src'},
    py_modules=[
        'cli',
        'scanner',
        'remediation',
        'search_paths',
        'session_log',
    ],
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Topic :: Security",
        "Topic :: System :: Systems Administration",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Environment :: Console",
    ],
    keywords=[
        "security-scanner", "cve-detection", "react-security",
        "npm-security", "react2shell", "cve-2025-55182",
    ],
    python_requires=">=3.10",
    install_requires=[r for r in requirements if r and not r.startswith("#")],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=4.0.0',
            'black>=23.0.0',
            'flake8>=6.0.0',
            'mypy>=1.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'react2shell-check=cli:main',
        ],
    },
    zip_safe=False,
)

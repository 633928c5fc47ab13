from setuptools import setup, find_packages
import re

# Read version from equitycalc/__init__.py
with open('equitycalc/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='equitycalc',
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'equitycalc': ['config/*.yaml'],
    },
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'python-dateutil>=2.8',
        'rich>=13.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'equity-calc=equitycalc.cli.__main__:main',
            'equity-calc-mcp=equitycalc.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Startup equity vesting, exercise cost, tax and exit scenario calculations.',
    python_requires='>=3.10',
)

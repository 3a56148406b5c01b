#!/usr/bin/env python3
"""
stereo_input Setup Script
"""

from setuptools import setup, find_packages

setup(
    name='stereo_input',
    version='1.0.0',
    description='Frame-indexed stereo dataset input layer for dense visual SLAM',
    author='FurSys AI Team',
    packages=find_packages(include=['stereo_input', 'stereo_input.*']),
    python_requires='>=3.8',
    install_requires=[
        'numpy>=1.20.0',
        'opencv-python>=4.5.0',
        'pyyaml>=5.4.0',
    ],
    extras_require={
        'dev': [
            'pytest>=6.0.0',
            'pytest-cov>=2.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'stereo_input=stereo_input.main:main',
        ],
    },
)

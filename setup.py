from setuptools import setup, find_packages

setup(
    name='bvh_sdk_python',
    version='0.1.0',
    packages=find_packages(include=['bvh_sdk_python', 'bvh_sdk_python.*']),
    package_data={
        'bvh_sdk_python': ['retargeter/configs/*.json'],
    },
    python_requires='>=3.9',
    install_requires=[
        'numpy',
        'scipy',
    ],
    extras_require={
        # examples/play_bvh.py
        'examples': [
            'loop_rate_limiters',
        ],
        'dev': [
            'pytest>=7.0.0',
        ],
    },
)

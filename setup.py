from setuptools import setup, find_packages

setup(
    name='gittar',
    version='0.1.0',
    description='Fetch git repository snapshots as tarballs into a local cache',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.8',
    install_requires=[
        'requests',
        'urllib3',
        'platformdirs',
        'PyYAML',
        'rich',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-mock',
        ],
    },
    entry_points={
        'console_scripts': [
            'gittar=gittar.cli:main',
        ],
    },
)

# make sure every file can run on any computers, avoid absolute paths and undownloaded packages

#pip install setuptools first if not installed
from setuptools import setup, find_packages
import os


# Read requirements
def read_requirements():
    req_file = os.path.join(os.path.dirname(__file__), 'requirements.txt')
    if os.path.exists(req_file):
        with open(req_file) as f:
            return [line.strip() for line in f if line.strip() and not line.startswith('#')]
    return [
        "pyyaml",
        "numpy",
        "scipy",
        "matplotlib",
    ]


setup(
    name="walking_miqp_constraints",
    version="0.1.0",
    description="MIQP linear constraints assembler for a ZMP preview walking stabilizer",
    packages=find_packages(include=[
        'preview_model',
        'preview_model.*',
        'miqp_constraints',
        'miqp_constraints.*',
        'control_pipeline',
        'control_pipeline.*',
        'debug',
        'debug.*',
    ]),
    py_modules=['run_constraints_benchmark'],
    python_requires=">=3.8",
    install_requires=read_requirements(),
    extras_require={
        'test': ['pytest'],
    },
    package_data={
        '': ['*.yaml', '*.yml'],
    },
    include_package_data=True,
)

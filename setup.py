from setuptools import setup
# read the contents of your README file
from pathlib import Path

# Freeze requirements instructions
# pip uninstall disc_image_tools
# python ./setup.py sdist
# pip install disc_image_tools
# pip freeze > requirements.txt

this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

# Read the dependencies from install_requires.txt
# install_requires.txt contains relaxed constraints for distribution
with open('install_requires.txt', encoding='utf-8') as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]

setup(
    name='disc_image_tools',
    version='1.0.0',
    packages=[
        'disc_image_tools',
        'disc_image_tools.batch',
        'disc_image_tools.batch.models',
        'disc_image_tools.services',
        'disc_image_tools.api',
        'disc_image_tools.utils',
    ],
    python_requires='>=3.11',
    license='GNU General Public License v3.0',
    description='Batch conversion of CD/DVD disc images to and from CHD using chdman.',
    long_description=long_description,
    long_description_content_type='text/markdown',
    install_requires=requirements,
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'discimage-batch=disc_image_tools.cli:main',
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Environment :: Console',
        'Intended Audience :: End Users/Desktop',
        'Natural Language :: English',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.11',
        'Topic :: System :: Archiving :: Compression',
        'Topic :: Utilities',
    ],
)

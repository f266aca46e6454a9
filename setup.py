from setuptools import setup, find_packages

setup(
    name='temporal-iso8601',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    python_requires='>=3.8',
    install_requires=[
        'abnf>=2.2',
        'pydantic>=2.0',
        'typing_extensions',
    ],
    extras_require={
        'test': [
            'pytest',
            'pyhumps',
            'python-dateutil',
        ],
    },
    license='MIT',
    description='A strict parser for the ISO 8601 strings of the Temporal API.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
)

# Copyright 2024 The jenkins-pipeline-codec Authors
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

import setuptools

test_requires = [
    'fixtures>=3.0.0',
    'pytest',
    'PyYAML>=5.1',
    'testscenarios>=0.4',
    'testtools>=2.4.0',
]


setuptools.setup(
    name='jenkins-pipeline-codec',
    version='0.1.0',
    author='The jenkins-pipeline-codec Authors',
    description='Convert Jenkins pipeline models to and from config.xml',
    license='Apache License, Version 2.0',
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    install_requires=[],
    extras_require={
        'test': test_requires,
    },
    python_requires='>=3.9',
    zip_safe=False,
    classifiers=[
        'Intended Audience :: Developers',
        'Intended Audience :: Information Technology',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ],
)

#!/usr/bin/env python
#
# Copyright 2024 The jenkins-pipeline-codec Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

import io
import logging
import os
import re
import xml.etree.ElementTree as XML

import fixtures
import testtools
from testtools.content import text_content
import testscenarios
import yaml

from jenkins_pipelines.config import CodecConfig
from jenkins_pipelines.models import from_dict
from jenkins_pipelines.models import to_dict
from jenkins_pipelines.xml_config import parse_config_xml
from jenkins_pipelines.xml_config import XmlJob


def get_scenarios(fixtures_path, in_ext='xml', out_ext='yaml',
                  filter_func=None):
    """Returns a list of scenarios, each scenario being described
    by two parameters (xml and yaml filenames by default).
        - content of the fixture output file (aka expected)
    """
    scenarios = []
    files = {}
    for dirpath, _, fs in os.walk(fixtures_path):
        for fn in fs:
            if fn in files:
                files[fn].append(os.path.join(dirpath, fn))
            else:
                files[fn] = [os.path.join(dirpath, fn)]

    input_files = [files[f][0] for f in files if
                   re.match(r'.*\.{0}$'.format(in_ext), f)]

    for input_filename in sorted(input_files):
        if callable(filter_func) and filter_func(input_filename):
            continue

        output_candidate = re.sub(r'\.{0}$'.format(in_ext),
                                  '.{0}'.format(out_ext), input_filename)
        if os.path.basename(output_candidate) in files:
            out_filename = files[os.path.basename(output_candidate)][0]
        else:
            out_filename = None

        conf_candidate = re.sub(r'\.{0}$'.format(in_ext), '.conf',
                                input_filename)
        conf_filename = files.get(os.path.basename(conf_candidate), None)
        if conf_filename:
            conf_filename = conf_filename[0]

        scenarios.append((os.path.basename(input_filename), {
            'in_filename': input_filename,
            'out_filename': out_filename,
            'conf_filename': conf_filename,
        }))

    return scenarios


class BaseTestCase(testtools.TestCase):

    # TestCase settings:
    maxDiff = None      # always dump text difference
    longMessage = True  # keep normal error message when providing our

    def setUp(self):

        super(BaseTestCase, self).setUp()
        self.logger = self.useFixture(fixtures.FakeLogger(level=logging.DEBUG))

    def _read_utf8_content(self, filename):
        with io.open(filename, 'r', encoding='utf-8') as xml_file:
            return xml_file.read()

    def _read_yaml_content(self, filename):
        with io.open(filename, 'r', encoding='utf-8') as yaml_file:
            return yaml.safe_load(yaml_file)

    def _get_config(self):
        return CodecConfig(getattr(self, 'conf_filename', None))

    def assertXmlEqual(self, expected, actual):
        """Compare two XML documents ignoring insignificant whitespace."""
        expected_xml = XmlJob(parse_config_xml(expected)).output()
        actual_xml = XmlJob(parse_config_xml(actual)).output()
        self.assertEqual(expected_xml, actual_xml)


class BaseScenariosTestCase(testscenarios.TestWithScenarios, BaseTestCase):
    """Decode every XML fixture with ``klass`` and compare the model with
    the sibling YAML file, then check the model survives an encode/decode
    cycle.
    """

    scenarios = []
    fixtures_path = None
    klass = None
    model_class = None

    def can_encode(self, pipeline):
        return True

    def test_xml_snippet(self):
        if not self.in_filename:
            return

        config = self._get_config()
        module = self.klass(config)

        xml_content = self._read_utf8_content(self.in_filename)
        expected = from_dict(self.model_class,
                             self._read_yaml_content(self.out_filename))
        self.addDetail("expected-model", text_content(str(to_dict(expected))))

        pipeline = module.parse_xml(parse_config_xml(xml_content))
        self.assertEqual(to_dict(expected), to_dict(pipeline))

        if not self.can_encode(pipeline):
            return
        root = module.root_xml()
        module.update_xml(root, pipeline)
        output = XmlJob(root, config.indent).output()
        self.addDetail("encoded-xml", text_content(output))
        self.assertEqual(pipeline, module.parse_xml(parse_config_xml(output)))


def element(text):
    """Build an element tree from an XML snippet."""
    return XML.fromstring(text)

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

import xml.etree.ElementTree as XML

from jenkins_pipelines import errors
from jenkins_pipelines import xml_config

from tests import base


class TestXmlVersion(base.BaseTestCase):

    def test_only_first_line_rewritten(self):
        config = ("<?xml version='1.1' encoding='UTF-8'?>\n"
                  "<flow-definition>\n"
                  "  <description>version='1.1'</description>\n"
                  "</flow-definition>")
        result = xml_config.replace_xml_version(config, '1.1', '1.0')
        self.assertEqual(
            "<?xml version='1.0' encoding='UTF-8'?>\n"
            "<flow-definition>\n"
            "  <description>version='1.1'</description>\n"
            "</flow-definition>", result)

    def test_parse_xml_1_1(self):
        root = xml_config.parse_config_xml(
            '<?xml version="1.1" encoding="UTF-8"?><flow-definition>'
            '<description>ok</description></flow-definition>')
        self.assertEqual('flow-definition', root.tag)
        self.assertEqual('ok', root.find('description').text)

    def test_parse_leading_whitespace(self):
        root = xml_config.parse_config_xml(
            "\n  <?xml version='1.1' encoding='UTF-8'?>\n<flow-definition/>")
        self.assertEqual('flow-definition', root.tag)

    def test_parse_malformed(self):
        e = self.assertRaises(errors.XmlFormatError,
                              xml_config.parse_config_xml,
                              "<?xml version='1.1'?>\n<flow-definition>")
        self.assertIn("Malformed Jenkins config.xml", str(e))

    def test_ignorable_whitespace_removed(self):
        root = xml_config.parse_config_xml(
            "<flow-definition>\n  <description>  keep  </description>\n"
            "  <script>\n</script>\n</flow-definition>")
        self.assertIsNone(root.text)
        self.assertIsNone(root.find('description').tail)
        self.assertEqual('  keep  ', root.find('description').text)
        self.assertEqual('\n', root.find('script').text)


class TestXmlJob(base.BaseTestCase):

    def test_output(self):
        root = XML.Element('flow-definition', {'plugin': 'workflow-job'})
        XML.SubElement(root, 'description').text = 'multi\nline'
        XML.SubElement(root, 'disabled').text = 'false'
        XML.SubElement(root, 'actions')

        self.assertEqual(
            "<?xml version='1.1' encoding='UTF-8'?>\n"
            "<flow-definition plugin=\"workflow-job\">\n"
            "  <description>multi\nline</description>\n"
            "  <disabled>false</disabled>\n"
            "  <actions />\n"
            "</flow-definition>", xml_config.XmlJob(root).output())

    def test_output_indent(self):
        root = XML.Element('flow-definition')
        XML.SubElement(root, 'description').text = 'x'
        output = xml_config.XmlJob(root, indent=4).output()
        self.assertIn("\n    <description>x</description>\n", output)

    def test_output_parses_back(self):
        root = XML.Element('flow-definition')
        XML.SubElement(XML.SubElement(root, 'definition'), 'script').text = \
            "node {\n  echo '<&>'\n}"
        output = xml_config.XmlJob(root).output()
        parsed = xml_config.parse_config_xml(output)
        self.assertEqual("node {\n  echo '<&>'\n}",
                         parsed.find('definition/script').text)

    def test_output_carriage_return(self):
        root = XML.Element('flow-definition', {'note': 'a\r\nb'})
        XML.SubElement(root, 'description').text = 'line1\r\nline2'
        output = xml_config.XmlJob(root).output()
        self.assertNotIn('\r', output)
        self.assertIn('<description>line1&#13;\nline2</description>', output)
        parsed = xml_config.parse_config_xml(output)
        self.assertEqual('line1\r\nline2', parsed.find('description').text)
        self.assertEqual('a\r\nb', parsed.get('note'))

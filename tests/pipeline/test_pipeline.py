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

import os

from testtools import ExpectedException

from jenkins_pipelines.codec import create_pipeline_config_xml
from jenkins_pipelines.codec import parse_pipeline_config_xml
from jenkins_pipelines.codec import update_pipeline_config_xml
from jenkins_pipelines.config import CodecConfig
from jenkins_pipelines import errors
from jenkins_pipelines.models import Discarder
from jenkins_pipelines.models import GenericVariable
from jenkins_pipelines.models import GenericWebhook
from jenkins_pipelines.models import ParameterDefinition
from jenkins_pipelines.models import RemoteTrigger
from jenkins_pipelines.models import SinglePipeline
from jenkins_pipelines.models import TimerTrigger
from jenkins_pipelines.modules import project_pipeline
from jenkins_pipelines.xml_config import parse_config_xml
from tests import base


EXISTING_JOB = """<?xml version='1.1' encoding='UTF-8'?>
<flow-definition plugin="workflow-job@2.41">
  <actions/>
  <description>old description</description>
  <keepDependencies>false</keepDependencies>
  <properties>
    <com.example.CustomJobProperty>
      <value>kept</value>
    </com.example.CustomJobProperty>
    <jenkins.model.BuildDiscarderProperty>
      <strategy class="hudson.tasks.LogRotator">
        <daysToKeep>7</daysToKeep>
        <numToKeep>10</numToKeep>
        <artifactDaysToKeep>-1</artifactDaysToKeep>
        <artifactNumToKeep>-1</artifactNumToKeep>
      </strategy>
    </jenkins.model.BuildDiscarderProperty>
    <org.jenkinsci.plugins.workflow.job.properties.PipelineTriggersJobProperty>
      <triggers>
        <hudson.triggers.TimerTrigger>
          <spec>H * * * *</spec>
        </hudson.triggers.TimerTrigger>
        <hudson.triggers.SCMTrigger>
          <spec>H/5 * * * *</spec>
          <ignorePostCommitHooks>false</ignorePostCommitHooks>
        </hudson.triggers.SCMTrigger>
      </triggers>
    </org.jenkinsci.plugins.workflow.job.properties.PipelineTriggersJobProperty>
  </properties>
  <definition class="org.jenkinsci.plugins.workflow.cps.CpsFlowDefinition" plugin="workflow-cps@2.94">
    <script>node{echo 'old'}</script>
    <sandbox>false</sandbox>
  </definition>
  <triggers/>
  <authToken>secret</authToken>
  <disabled>false</disabled>
</flow-definition>
"""


class TestCasePipeline(base.BaseScenariosTestCase):
    fixtures_path = os.path.join(os.path.dirname(__file__), 'fixtures')
    scenarios = base.get_scenarios(fixtures_path)
    klass = project_pipeline.Pipeline
    model_class = SinglePipeline


class TestCasePipelineRoundTrip(base.BaseTestCase):

    def assertRoundTrip(self, inputs):
        for index, pipeline in enumerate(inputs):
            output = parse_pipeline_config_xml(
                create_pipeline_config_xml(pipeline))
            self.assertEqual(pipeline, output,
                             "pipeline {0} changed".format(index))

    def test_basic(self):
        self.assertRoundTrip([
            SinglePipeline(description='for test',
                           jenkinsfile="node{echo 'hello'}"),
            SinglePipeline(jenkinsfile="node{echo 'hello'}"),
            SinglePipeline(jenkinsfile="node{echo 'hello'}",
                           disable_concurrent=True),
        ])

    def test_discarder(self):
        self.assertRoundTrip([
            SinglePipeline(description='for test',
                           jenkinsfile="node{echo 'hello'}",
                           discarder=Discarder(days_to_keep=days,
                                               num_to_keep=num))
            for days, num in [('3', '5'), ('3', ''), ('', '21321'), ('', '')]
        ])

    def test_parameters(self):
        choice = ParameterDefinition(name='d', default_value='a\nb',
                                     type='choice', description='fortest')
        self.assertRoundTrip([
            SinglePipeline(jenkinsfile="node{echo 'hello'}",
                           parameters=[choice]),
            SinglePipeline(jenkinsfile="node{echo 'hello'}", parameters=[
                ParameterDefinition(name='a', default_value='abc',
                                    type='string', description='fortest'),
                ParameterDefinition(name='b', default_value='false',
                                    type='boolean', description='fortest'),
                ParameterDefinition(name='c',
                                    default_value='password \n aaa',
                                    type='text', description='fortest'),
                choice,
                ParameterDefinition(name='p', default_value='s3cr3t',
                                    type='password'),
            ]),
        ])

    def test_crlf_script(self):
        self.assertRoundTrip([
            SinglePipeline(jenkinsfile="node {\r\n  echo 'hi'\r\n}\r\n",
                           description='line1\r\nline2'),
            SinglePipeline(parameters=[
                ParameterDefinition(name='t', default_value='a\r\nb',
                                    type='text'),
                ParameterDefinition(name='env',
                                    default_value='dev\r\nprod',
                                    type='choice'),
            ]),
        ])

    def test_triggers(self):
        timer = TimerTrigger(cron='1 1 1 * * *')
        remote = RemoteTrigger(token='abc')
        webhook = GenericWebhook(
            token='hook', cause='Triggered by hook', print_variables=True,
            filter_text='$ref', filter_expression='refs/heads/master',
            request_variables=[GenericVariable(key='ref')],
            header_variables=[GenericVariable(key='X-Event',
                                              regexp_filter='push')])
        self.assertRoundTrip([
            SinglePipeline(jenkinsfile="node{echo 'hello'}",
                           timer_trigger=timer),
            SinglePipeline(jenkinsfile="node{echo 'hello'}",
                           remote_trigger=remote),
            SinglePipeline(jenkinsfile="node{echo 'hello'}",
                           timer_trigger=timer, remote_trigger=remote),
            SinglePipeline(jenkinsfile="node{echo 'hello'}",
                           generic_webhook=webhook),
            SinglePipeline(jenkinsfile="node{echo 'hello'}",
                           timer_trigger=timer, generic_webhook=webhook,
                           remote_trigger=remote),
        ])

    def test_file_parameter_has_no_default(self):
        pipeline = SinglePipeline(parameters=[
            ParameterDefinition(name='upload', default_value='ignored',
                                type='file')])
        output = parse_pipeline_config_xml(create_pipeline_config_xml(
            pipeline))
        self.assertEqual(
            (ParameterDefinition(name='upload', type='file'),),
            output.parameters)


class TestCasePipelineCreate(base.BaseTestCase):

    def test_document_header(self):
        output = create_pipeline_config_xml(SinglePipeline())
        self.assertTrue(output.startswith(
            "<?xml version='1.1' encoding='UTF-8'?>\n<flow-definition"))

    def test_property_order(self):
        pipeline = SinglePipeline(
            discarder=Discarder(days_to_keep='1'),
            disable_concurrent=True,
            parameters=[ParameterDefinition(name='a', type='string')],
            timer_trigger=TimerTrigger(cron='@daily'))
        root = parse_config_xml(create_pipeline_config_xml(pipeline))
        properties = root.find('properties')
        self.assertEqual([
            project_pipeline.BUILD_DISCARDER,
            project_pipeline.DISABLE_CONCURRENT,
            'hudson.model.ParametersDefinitionProperty',
            project_pipeline.PIPELINE_TRIGGERS,
        ], [child.tag for child in properties])

    def test_definition_sandboxed(self):
        root = parse_config_xml(create_pipeline_config_xml(
            SinglePipeline(jenkinsfile='node {}')))
        definition = root.find('definition')
        self.assertEqual(
            'org.jenkinsci.plugins.workflow.cps.CpsFlowDefinition',
            definition.get('class'))
        self.assertEqual('node {}', definition.find('script').text)
        self.assertEqual('true', definition.find('sandbox').text)
        self.assertEqual('false', root.find('disabled').text)

    def test_choice_string_array(self):
        root = parse_config_xml(create_pipeline_config_xml(SinglePipeline(
            parameters=[ParameterDefinition(name='env', type='choice',
                                            default_value='dev\nprod')])))
        choices = root.find(
            'properties/hudson.model.ParametersDefinitionProperty/'
            'parameterDefinitions/hudson.model.ChoiceParameterDefinition/'
            'choices')
        self.assertEqual('java.util.Arrays$ArrayList', choices.get('class'))
        self.assertEqual(['dev', 'prod'],
                         [s.text for s in choices.findall('a/string')])

    def test_indent(self):
        config = CodecConfig()
        config.indent = 4
        output = create_pipeline_config_xml(SinglePipeline(), config)
        self.assertIn('\n    <actions>', output)

    def test_parameter_without_type(self):
        pipeline = SinglePipeline(parameters=[ParameterDefinition(name='a')])
        message = "SinglePipeline has no value for required field 'type'"
        with ExpectedException(errors.MissingAttributeError, message):
            create_pipeline_config_xml(pipeline)

    def test_unknown_parameter_type_passes_through(self):
        param = ParameterDefinition(
            name='BRANCH', default_value='origin/master',
            type='net.uaznia.lukanus.hudson.plugins.gitparameter.'
                 'GitParameterDefinition')
        output = create_pipeline_config_xml(
            SinglePipeline(parameters=[param]))
        self.assertEqual((param,),
                         parse_pipeline_config_xml(output).parameters)
        self.assertIn("Passing through parameter BRANCH", self.logger.output)


class TestCasePipelineUpdate(base.BaseTestCase):

    def test_unmanaged_elements_kept(self):
        pipeline = SinglePipeline(description='new description',
                                  jenkinsfile="node{echo 'new'}")
        root = parse_config_xml(update_pipeline_config_xml(EXISTING_JOB,
                                                           pipeline))

        self.assertEqual('false', root.find('keepDependencies').text)
        self.assertEqual('kept', root.find(
            'properties/com.example.CustomJobProperty/value').text)
        # only the managed triggers are dropped
        trigger_tags = [child.tag for child in root.find(
            'properties/' + project_pipeline.PIPELINE_TRIGGERS + '/triggers')]
        self.assertEqual(['hudson.triggers.SCMTrigger'], trigger_tags)

    def test_absent_settings_removed(self):
        pipeline = SinglePipeline(description='new description',
                                  jenkinsfile="node{echo 'new'}")
        output = update_pipeline_config_xml(EXISTING_JOB, pipeline)
        root = parse_config_xml(output)

        self.assertIsNone(root.find('authToken'))
        self.assertIsNone(root.find(
            'properties/' + project_pipeline.BUILD_DISCARDER))
        self.assertEqual('true', root.find('definition/sandbox').text)
        self.assertEqual(pipeline, parse_pipeline_config_xml(output))

    def test_settings_replaced(self):
        pipeline = SinglePipeline(
            description='new description',
            jenkinsfile="node{echo 'new'}",
            discarder=Discarder(days_to_keep='1', num_to_keep='2'),
            timer_trigger=TimerTrigger(cron='@midnight'),
            remote_trigger=RemoteTrigger(token='other'))
        output = update_pipeline_config_xml(EXISTING_JOB, pipeline)
        root = parse_config_xml(output)

        self.assertEqual(1, len(root.findall(
            'properties/' + project_pipeline.BUILD_DISCARDER)))
        self.assertEqual(1, len(root.findall('authToken')))
        self.assertEqual(pipeline, parse_pipeline_config_xml(output))

    def test_element_order_kept(self):
        pipeline = SinglePipeline(jenkinsfile='node {}')
        root = parse_config_xml(update_pipeline_config_xml(EXISTING_JOB,
                                                           pipeline))
        self.assertEqual(['actions', 'description', 'keepDependencies',
                          'properties', 'definition', 'triggers', 'disabled'],
                         [child.tag for child in root])

    def test_wrong_root(self):
        config_xml = "<?xml version='1.1' encoding='UTF-8'?>\n<project/>"
        with ExpectedException(errors.MissingElementError,
                               "can not find pipeline definition"):
            update_pipeline_config_xml(config_xml, SinglePipeline())
        with ExpectedException(errors.MissingElementError,
                               "can not find pipeline definition"):
            parse_pipeline_config_xml(config_xml)

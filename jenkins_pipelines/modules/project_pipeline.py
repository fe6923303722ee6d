# -*- coding: utf-8 -*-
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


"""
The Pipeline Project module handles Jenkins Pipeline projects whose
Jenkinsfile is stored inline in the job, the ``flow-definition`` documents.

Requires the Jenkins :jenkins-plugins:`Pipeline Plugin <workflow-aggregator>`.

The document is laid out in this order:

    * ``description``
    * ``properties``: build discarder, concurrent builds, parameters and
      the pipeline triggers (timer and generic webhook)
    * ``definition``: the inline script, always run in the Groovy sandbox
    * ``triggers``, ``authToken`` (remote trigger) and ``disabled``

The script is stored as-is: unlike job templates it is not passed through
any string formatting.
"""
import logging
import xml.etree.ElementTree as XML

import jenkins_pipelines.modules.base
import jenkins_pipelines.modules.helpers as helpers
import jenkins_pipelines.modules.parameters as parameters
import jenkins_pipelines.modules.triggers as triggers
from jenkins_pipelines.models import Discarder
from jenkins_pipelines.models import RemoteTrigger
from jenkins_pipelines.models import SinglePipeline

logger = logging.getLogger(__name__)

BUILD_DISCARDER = 'jenkins.model.BuildDiscarderProperty'
DISABLE_CONCURRENT = ('org.jenkinsci.plugins.workflow.job.properties.'
                      'DisableConcurrentBuildsJobProperty')
PIPELINE_TRIGGERS = ('org.jenkinsci.plugins.workflow.job.properties.'
                     'PipelineTriggersJobProperty')
declarative_path = 'org.jenkinsci.plugins.pipeline.modeldefinition.actions'


class Pipeline(jenkins_pipelines.modules.base.Base):
    jenkins_class = 'flow-definition'
    missing_root_msg = "can not find pipeline definition"

    def root_xml(self):
        xml_parent = XML.Element(self.jenkins_class,
                                 {'plugin': 'workflow-job'})
        actions = XML.SubElement(xml_parent, 'actions')
        XML.SubElement(actions, declarative_path + '.DeclarativeJobAction', {
            'plugin': 'pipeline-model-definition',
        })
        tracker = XML.SubElement(
            actions, declarative_path + '.DeclarativeJobPropertyTrackerAction',
            {'plugin': 'pipeline-model-definition'})
        for tag in ['jobProperties', 'triggers', 'parameters', 'options']:
            XML.SubElement(tracker, tag)
        return xml_parent

    def update_xml(self, root, pipeline):
        self.check_root(root)
        logger.debug("Updating {0} document".format(self.jenkins_class))

        helpers.get_or_create_child(root, 'description', pipeline.description)
        properties = helpers.get_or_create_child(root, 'properties')
        self.update_properties(properties, pipeline)

        # the definition is rebuilt at its current position
        definition = helpers.get_or_create_child(root, 'definition')
        definition.clear()
        helpers.set_attribute(
            definition, 'class',
            'org.jenkinsci.plugins.workflow.cps.CpsFlowDefinition')
        helpers.set_attribute(definition, 'plugin', 'workflow-cps')
        XML.SubElement(definition, 'script').text = pipeline.jenkinsfile
        XML.SubElement(definition, 'sandbox').text = 'true'

        helpers.get_or_create_child(root, 'triggers')
        if pipeline.remote_trigger is not None:
            helpers.get_or_create_child(root, 'authToken',
                                        pipeline.remote_trigger.token)
        else:
            helpers.remove_child(root, 'authToken')
        helpers.get_or_create_child(root, 'disabled', 'false')
        return root

    def update_properties(self, properties, pipeline):
        if pipeline.discarder is not None:
            discarder = helpers.get_or_create_child(properties,
                                                    BUILD_DISCARDER)
            strategy = helpers.get_or_create_child(discarder, 'strategy')
            helpers.set_attribute(strategy, 'class', 'hudson.tasks.LogRotator')
            helpers.get_or_create_child(strategy, 'daysToKeep',
                                        pipeline.discarder.days_to_keep)
            helpers.get_or_create_child(strategy, 'numToKeep',
                                        pipeline.discarder.num_to_keep)
            helpers.get_or_create_child(strategy, 'artifactDaysToKeep', '-1')
            helpers.get_or_create_child(strategy, 'artifactNumToKeep', '-1')
        else:
            helpers.remove_child(properties, BUILD_DISCARDER)

        if pipeline.disable_concurrent:
            helpers.get_or_create_child(properties, DISABLE_CONCURRENT)
        else:
            helpers.remove_child(properties, DISABLE_CONCURRENT)

        if pipeline.parameters:
            parameters.replace_parameters(properties, pipeline.parameters)
        else:
            helpers.remove_child(properties, parameters.PARAMETERS_PROPERTY)

        trigger_property = helpers.select_child(properties, PIPELINE_TRIGGERS)
        if (pipeline.timer_trigger is None and
                pipeline.generic_webhook is None and
                trigger_property is None):
            return
        trigger_property = helpers.get_or_create_child(properties,
                                                       PIPELINE_TRIGGERS)
        xml_triggers = helpers.get_or_create_child(trigger_property,
                                                   'triggers')
        # other triggers configured in Jenkins are kept
        helpers.remove_child(xml_triggers, triggers.TIMER_TRIGGER)
        helpers.remove_child(xml_triggers, triggers.GENERIC_TRIGGER)
        triggers.timer(xml_triggers, pipeline.timer_trigger)
        triggers.append_generic_webhook(xml_triggers, pipeline.generic_webhook)

    def parse_xml(self, root):
        self.check_root(root)
        properties = helpers.select_child(root, 'properties')

        discarder = None
        xml_discarder = helpers.select_child(properties, BUILD_DISCARDER)
        if xml_discarder is not None:
            strategy = helpers.select_child(xml_discarder, 'strategy')
            discarder = Discarder(
                days_to_keep=helpers.child_text(strategy, 'daysToKeep'),
                num_to_keep=helpers.child_text(strategy, 'numToKeep'))

        xml_triggers = helpers.select_child(
            helpers.select_child(properties, PIPELINE_TRIGGERS), 'triggers')

        remote_trigger = None
        auth_token = helpers.select_child(root, 'authToken')
        if auth_token is not None:
            remote_trigger = RemoteTrigger(token=auth_token.text or '')

        return SinglePipeline(
            description=helpers.child_text(root, 'description'),
            jenkinsfile=helpers.child_text(
                helpers.select_child(root, 'definition'), 'script'),
            disable_concurrent=helpers.select_child(
                properties, DISABLE_CONCURRENT) is not None,
            discarder=discarder,
            parameters=parameters.get_parameters(properties),
            timer_trigger=triggers.get_timer(xml_triggers),
            generic_webhook=triggers.get_generic_webhook(
                helpers.select_child(xml_triggers, triggers.GENERIC_TRIGGER)),
            remote_trigger=remote_trigger,
        )

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
Triggers define what causes a pipeline to start building.

Single pipelines support a cron ``timer`` trigger, the Generic Webhook
Trigger plugin and a remote ``authToken``; multibranch pipelines support a
periodic branch indexing trigger and the multibranch action triggers
property.
"""

import logging
import xml.etree.ElementTree as XML

from jenkins_pipelines.errors import InvalidAttributeError
import jenkins_pipelines.modules.helpers as helpers
from jenkins_pipelines.models import GenericVariable
from jenkins_pipelines.models import GenericWebhook
from jenkins_pipelines.models import MultiBranchJobTrigger
from jenkins_pipelines.models import TimerTrigger

logger = logging.getLogger(__name__)

TIMER_TRIGGER = 'hudson.triggers.TimerTrigger'
GENERIC_TRIGGER = 'org.jenkinsci.plugins.gwt.GenericTrigger'
GENERIC_REQUEST_VARIABLE = 'org.jenkinsci.plugins.gwt.GenericRequestVariable'
GENERIC_HEADER_VARIABLE = 'org.jenkinsci.plugins.gwt.GenericHeaderVariable'
PERIODIC_FOLDER_TRIGGER = ('com.cloudbees.hudson.plugins.folder.computed.'
                           'PeriodicFolderTrigger')
MULTIBRANCH_JOB_TRIGGER = ('org.jenkinsci.plugins.workflow.multibranch.'
                           'PipelineTriggerProperty')

MINUTE = 60 * 1000
HOUR = 60 * MINUTE

# upper bound in milliseconds (inclusive), cron spec
CRONTAB_BUCKETS = [
    (5 * MINUTE, '* * * * *'),
    (30 * MINUTE, 'H/5 * * * *'),
    (1 * HOUR, 'H/15 * * * *'),
    (8 * HOUR, 'H/30 * * * *'),
    (24 * HOUR, 'H H/4 * * *'),
    (48 * HOUR, 'H H/12 * * *'),
]


def millis_to_crontab(millis):
    """Return the cron spec Jenkins uses to check a folder scan interval of
    ``millis`` milliseconds.
    """
    for bound, spec in CRONTAB_BUCKETS:
        if millis <= bound:
            return spec
    return 'H H * * *'


def timer(xml_parent, timer_trigger):
    """Append a cron ``hudson.triggers.TimerTrigger`` to ``xml_parent``."""
    if timer_trigger is None:
        return None
    trigger = XML.SubElement(xml_parent, TIMER_TRIGGER)
    XML.SubElement(trigger, 'spec').text = timer_trigger.cron
    return trigger


def get_timer(xml_parent):
    trigger = helpers.select_child(xml_parent, TIMER_TRIGGER)
    if trigger is None:
        return None
    return TimerTrigger(cron=helpers.child_text(trigger, 'spec'))


def append_generic_webhook(xml_parent, webhook):
    """Append a Generic Webhook Trigger; a missing parent or webhook writes
    nothing.
    """
    if xml_parent is None or webhook is None:
        return None

    trigger = XML.SubElement(xml_parent, GENERIC_TRIGGER)
    XML.SubElement(trigger, 'spec')
    mapping = [
        ('token', 'token', ''),
        ('cause', 'causeString', ''),
        ('print_variables', 'printContributedVariables', False),
        ('print_post_content', 'printPostContent', False),
        ('filter_text', 'regexpFilterText', ''),
        ('filter_expression', 'regexpFilterExpression', ''),
    ]
    helpers.convert_mapping_to_xml(trigger, webhook, mapping)

    for tag, variable_tag, variables in [
            ('genericRequestVariables', GENERIC_REQUEST_VARIABLE,
             webhook.request_variables),
            ('genericHeaderVariables', GENERIC_HEADER_VARIABLE,
             webhook.header_variables)]:
        xml_variables = XML.SubElement(trigger, tag)
        for variable in variables:
            xml_variable = XML.SubElement(xml_variables, variable_tag)
            XML.SubElement(xml_variable, 'key').text = variable.key
            XML.SubElement(xml_variable, 'regexpFilter').text = \
                variable.regexp_filter
    return trigger


def get_generic_webhook(trigger):
    if trigger is None:
        return None

    mapping = [
        ('token', 'token', ''),
        ('cause', 'causeString', ''),
        ('print_variables', 'printContributedVariables', False),
        ('print_post_content', 'printPostContent', False),
        ('filter_text', 'regexpFilterText', ''),
        ('filter_expression', 'regexpFilterExpression', ''),
    ]
    data = helpers.convert_xml_to_mapping(trigger, mapping)

    for field, tag, variable_tag in [
            ('request_variables', 'genericRequestVariables',
             GENERIC_REQUEST_VARIABLE),
            ('header_variables', 'genericHeaderVariables',
             GENERIC_HEADER_VARIABLE)]:
        xml_variables = helpers.select_child(trigger, tag)
        data[field] = [
            GenericVariable(
                key=helpers.child_text(xml_variable, 'key'),
                regexp_filter=helpers.child_text(xml_variable,
                                                 'regexpFilter'))
            for xml_variable in helpers.select_children(xml_variables,
                                                        variable_tag)]
    return GenericWebhook(**data)


def periodic_folder_trigger(xml_parent, timer_trigger):
    """Append a branch indexing trigger running every
    ``timer_trigger.interval`` milliseconds.
    """
    if timer_trigger is None:
        return None
    try:
        millis = int(timer_trigger.interval)
    except (TypeError, ValueError):
        raise InvalidAttributeError('interval', timer_trigger.interval)

    trigger = XML.SubElement(xml_parent, PERIODIC_FOLDER_TRIGGER, {
        'plugin': 'cloudbees-folder',
    })
    XML.SubElement(trigger, 'spec').text = millis_to_crontab(millis)
    XML.SubElement(trigger, 'interval').text = str(timer_trigger.interval)
    return trigger


def get_periodic_folder_trigger(xml_parent):
    trigger = helpers.select_child(xml_parent, PERIODIC_FOLDER_TRIGGER)
    if trigger is None:
        return None
    return TimerTrigger(interval=helpers.child_text(trigger, 'interval'))


def multibranch_job_trigger(properties, job_trigger):
    if job_trigger is None:
        return None
    prop = XML.SubElement(properties, MULTIBRANCH_JOB_TRIGGER, {
        'plugin': 'multibranch-action-triggers',
    })
    mapping = [
        ('create_action_jobs_to_trigger', 'createActionJobsToTrigger', ''),
        ('delete_action_jobs_to_trigger', 'deleteActionJobsToTrigger', ''),
    ]
    helpers.convert_mapping_to_xml(prop, job_trigger, mapping)
    return prop


def get_multibranch_job_trigger(properties):
    prop = helpers.select_child(properties, MULTIBRANCH_JOB_TRIGGER)
    if prop is None:
        return None
    mapping = [
        ('create_action_jobs_to_trigger', 'createActionJobsToTrigger', ''),
        ('delete_action_jobs_to_trigger', 'deleteActionJobsToTrigger', ''),
    ]
    return MultiBranchJobTrigger(
        **helpers.convert_xml_to_mapping(prop, mapping))

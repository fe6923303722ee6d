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
The Multibranch Pipeline project module handles Jenkins workflow projects
discovering their branches and pull requests from a single SCM source.

Plugins required:
    * :jenkins-plugins:`Pipeline: Multibranch <workflow-multibranch>`
    * :jenkins-plugins:`Multibranch Action Triggers
      <multibranch-action-triggers>` (optional)
    * the plugin of the branch source, see :mod:`jenkins_pipelines.modules.scm`

The source is selected by the ``source_type`` of the pipeline, which must be
one of ``git``, ``github``, ``gitlab``, ``bitbucket_server``, ``svn`` or
``single_svn``; only the matching source field may be set.

The branch indexing interval of the timer trigger is given in milliseconds
and turned into the cron spec Jenkins expects, e.g. an interval of
``3600000`` (one hour) is checked ``H/15 * * * *``.
"""
import logging
import xml.etree.ElementTree as XML

from jenkins_pipelines.errors import AttributeConflictError
from jenkins_pipelines.errors import MissingAttributeError
from jenkins_pipelines.errors import UnknownSourceClassError
from jenkins_pipelines.errors import UnsupportedSourceTypeError
import jenkins_pipelines.modules.base
import jenkins_pipelines.modules.helpers as helpers
import jenkins_pipelines.modules.scm as scm
import jenkins_pipelines.modules.triggers as triggers
from jenkins_pipelines.models import Discarder
from jenkins_pipelines.models import MultiBranchPipeline
from jenkins_pipelines.models import SOURCE_FIELDS
from jenkins_pipelines.models import SOURCE_TYPES

logger = logging.getLogger(__name__)

BRANCH_SOURCE = 'jenkins.branch.BranchSource'


class WorkflowMultiBranch(jenkins_pipelines.modules.base.Base):
    multibranch_path = 'org.jenkinsci.plugins.workflow.multibranch'
    jenkins_class = ''.join([multibranch_path, '.WorkflowMultiBranchProject'])
    jenkins_factory_class = ''.join(
        [multibranch_path, '.WorkflowBranchProjectFactory'])
    missing_root_msg = "can not parse multibranch pipeline config"

    def root_xml(self):
        xml_parent = XML.Element(self.jenkins_class)
        xml_parent.attrib['plugin'] = 'workflow-multibranch'
        XML.SubElement(xml_parent, 'actions')

        properties = XML.SubElement(xml_parent, 'properties')
        folder_config = XML.SubElement(
            properties,
            'org.jenkinsci.plugins.pipeline.modeldefinition.config.'
            'FolderConfig',
            {'plugin': 'pipeline-model-definition'})
        XML.SubElement(folder_config, 'dockerLabel')
        XML.SubElement(folder_config, 'registry', {
            'plugin': 'docker-commons',
        })

        ################
        # Folder Views #
        ################

        folderViews = XML.SubElement(xml_parent, 'folderViews', {
            'class': 'jenkins.branch.MultiBranchProjectViewHolder',
            'plugin': 'branch-api',
        })

        XML.SubElement(folderViews, 'owner', {
            'class': self.jenkins_class,
            'reference': '../..'
        })

        ##################
        # Health Metrics #
        ##################

        hm = XML.SubElement(xml_parent, 'healthMetrics')
        hm_path = ('com.cloudbees.hudson.plugins.folder.health'
                   '.WorstChildHealthMetric')
        hm_plugin = XML.SubElement(hm, hm_path, {
            'plugin': 'cloudbees-folder',
        })
        XML.SubElement(hm_plugin, 'nonRecursive').text = 'false'

        ########
        # Icon #
        ########

        icon = XML.SubElement(xml_parent, 'icon', {
            'class': 'jenkins.branch.MetadataActionFolderIcon',
            'plugin': 'branch-api',
        })
        XML.SubElement(icon, 'owner', {
            'class': self.jenkins_class,
            'reference': '../..'
        })

        return xml_parent

    def check_source(self, pipeline):
        source_type = pipeline.source_type
        if source_type not in SOURCE_TYPES:
            raise UnsupportedSourceTypeError(source_type, SOURCE_TYPES)

        field = SOURCE_FIELDS[source_type]
        if getattr(pipeline, field) is None:
            raise MissingAttributeError(field)

        conflicts = [other for other in SOURCE_FIELDS.values()
                     if other != field and
                     getattr(pipeline, other) is not None]
        if conflicts:
            raise AttributeConflictError(field, conflicts)
        return field

    def update_xml(self, root, pipeline):
        self.check_root(root)
        field = self.check_source(pipeline)
        logger.debug("Updating {0} document with a {1} source".format(
            self.jenkins_class, pipeline.source_type))

        helpers.get_or_create_child(root, 'description', pipeline.description)

        properties = helpers.get_or_create_child(root, 'properties')
        helpers.remove_child(properties, triggers.MULTIBRANCH_JOB_TRIGGER)
        triggers.multibranch_job_trigger(properties,
                                         pipeline.multibranch_job_trigger)

        ########################
        # Orphan Item Strategy #
        ########################

        ois = helpers.get_or_create_child(root, 'orphanedItemStrategy')
        ois.clear()
        helpers.set_attribute(ois, 'class', 'com.cloudbees.hudson.plugins.'
                              'folder.computed.DefaultOrphanedItemStrategy')
        helpers.set_attribute(ois, 'plugin', 'cloudbees-folder')
        if pipeline.discarder is not None:
            ois_mapping = [
                ('', 'pruneDeadBranches', True),
                ('days_to_keep', 'daysToKeep', ''),
                ('num_to_keep', 'numToKeep', ''),
            ]
            helpers.convert_mapping_to_xml(ois, pipeline.discarder,
                                           ois_mapping)
        else:
            XML.SubElement(ois, 'pruneDeadBranches').text = 'false'

        ###########################
        # Periodic Folder Trigger #
        ###########################

        xml_triggers = helpers.get_or_create_child(root, 'triggers')
        helpers.remove_child(xml_triggers, triggers.PERIODIC_FOLDER_TRIGGER)
        triggers.periodic_folder_trigger(xml_triggers, pipeline.timer_trigger)

        helpers.get_or_create_child(root, 'disabled', 'false')

        ###########
        # Sources #
        ###########

        sources = helpers.get_or_create_child(root, 'sources')
        helpers.set_attribute(sources, 'class',
                              'jenkins.branch.MultiBranchProject$'
                              'BranchSourceList')
        helpers.set_attribute(sources, 'plugin', 'branch-api')
        sources_owner = helpers.get_or_create_child(sources, 'owner')
        helpers.set_attribute(sources_owner, 'class', self.jenkins_class)
        helpers.set_attribute(sources_owner, 'reference', '../..')

        data = helpers.get_or_create_child(sources, 'data')
        branch_source = helpers.get_or_create_child(data, BRANCH_SOURCE)
        # Jenkins writes the strategy ahead of the source
        if helpers.select_child(branch_source, 'strategy') is None:
            strategy = XML.Element('strategy', {
                'class': 'jenkins.branch.NamedExceptionsBranchPropertyStrategy'
            })
            XML.SubElement(strategy, 'defaultProperties',
                           {'class': 'empty-list'})
            XML.SubElement(strategy, 'namedExceptions',
                           {'class': 'empty-list'})
            branch_source.insert(0, strategy)

        source = helpers.get_or_create_child(branch_source, 'source')
        source.clear()
        scm.encode_source(source, pipeline.source_type,
                          getattr(pipeline, field))

        ###########
        # Factory #
        ###########

        factory = helpers.get_or_create_child(root, 'factory')
        helpers.set_attribute(factory, 'class', self.jenkins_factory_class)
        factory_owner = helpers.get_or_create_child(factory, 'owner')
        helpers.set_attribute(factory_owner, 'class', self.jenkins_class)
        helpers.set_attribute(factory_owner, 'reference', '../..')
        helpers.get_or_create_child(factory, 'scriptPath',
                                    pipeline.script_path)
        return root

    def parse_xml(self, root):
        self.check_root(root)
        data = {
            'description': helpers.child_text(root, 'description'),
            'multibranch_job_trigger': triggers.get_multibranch_job_trigger(
                helpers.select_child(root, 'properties')),
            'timer_trigger': triggers.get_periodic_folder_trigger(
                helpers.select_child(root, 'triggers')),
            # no scriptPath when the default Jenkinsfile is used
            'script_path': helpers.child_text(
                helpers.select_child(root, 'factory'), 'scriptPath'),
        }

        ois = helpers.select_child(root, 'orphanedItemStrategy')
        if helpers.parse_bool(helpers.child_text(ois, 'pruneDeadBranches')):
            data['discarder'] = Discarder(
                days_to_keep=helpers.child_text(ois, 'daysToKeep'),
                num_to_keep=helpers.child_text(ois, 'numToKeep'))

        branch_source = helpers.select_child(
            helpers.select_child(helpers.select_child(root, 'sources'),
                                 'data'),
            BRANCH_SOURCE)
        source = helpers.select_child(branch_source, 'source')
        if source is None:
            logger.warning("No branch source found in {0} "
                           "document".format(self.jenkins_class))
            return MultiBranchPipeline(**data)

        source_class = source.get('class', '')
        source_type = scm.SOURCE_CLASSES.get(source_class)
        if source_type is None:
            if self.config.strict_sources:
                raise UnknownSourceClassError(source_class)
            logger.warning("Ignoring branch source of unknown class "
                           "'{0}'".format(source_class))
            return MultiBranchPipeline(**data)

        data['source_type'] = source_type
        data[SOURCE_FIELDS[source_type]] = scm.decode_source(source,
                                                             source_type)
        return MultiBranchPipeline(**data)

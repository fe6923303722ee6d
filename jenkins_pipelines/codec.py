#!/usr/bin/env python
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

# Entry points converting pipeline models to and from Jenkins config.xml.

import logging

from jenkins_pipelines import errors
from jenkins_pipelines.config import CodecConfig
from jenkins_pipelines.models import MultiBranchPipeline
from jenkins_pipelines.models import SinglePipeline
from jenkins_pipelines.modules.project_multibranch import WorkflowMultiBranch
from jenkins_pipelines.modules.project_pipeline import Pipeline
from jenkins_pipelines.xml_config import parse_config_xml
from jenkins_pipelines.xml_config import XmlJob

__all__ = [
    "create_multibranch_pipeline_config_xml",
    "create_pipeline_config_xml",
    "decode",
    "encode",
    "parse_multibranch_pipeline_config_xml",
    "parse_pipeline_config_xml",
    "update_multibranch_pipeline_config_xml",
    "update_pipeline_config_xml",
]

logger = logging.getLogger(__name__)


def _create(module, pipeline, config):
    root = module.root_xml()
    module.update_xml(root, pipeline)
    return XmlJob(root, config.indent).output()


def _update(module, config_xml, pipeline, config):
    root = parse_config_xml(config_xml)
    module.update_xml(root, pipeline)
    return XmlJob(root, config.indent).output()


def create_pipeline_config_xml(pipeline, config=None):
    """Render a new ``flow-definition`` document for ``pipeline``.

    :arg SinglePipeline pipeline: the pipeline to render
    :arg CodecConfig config: codec options (optional)
    :returns: the XML 1.1 document text
    """
    config = config or CodecConfig()
    return _create(Pipeline(config), pipeline, config)


def update_pipeline_config_xml(config_xml, pipeline, config=None):
    """Apply ``pipeline`` to an existing ``flow-definition`` document,
    keeping the elements it does not manage.
    """
    config = config or CodecConfig()
    return _update(Pipeline(config), config_xml, pipeline, config)


def parse_pipeline_config_xml(config_xml, config=None):
    config = config or CodecConfig()
    return Pipeline(config).parse_xml(parse_config_xml(config_xml))


def create_multibranch_pipeline_config_xml(pipeline, config=None):
    """Render a new multibranch project document for ``pipeline``.

    :arg MultiBranchPipeline pipeline: the pipeline to render
    :arg CodecConfig config: codec options (optional)
    :returns: the XML 1.1 document text
    """
    config = config or CodecConfig()
    return _create(WorkflowMultiBranch(config), pipeline, config)


def update_multibranch_pipeline_config_xml(config_xml, pipeline,
                                           config=None):
    config = config or CodecConfig()
    return _update(WorkflowMultiBranch(config), config_xml, pipeline, config)


def parse_multibranch_pipeline_config_xml(config_xml, config=None):
    config = config or CodecConfig()
    return WorkflowMultiBranch(config).parse_xml(
        parse_config_xml(config_xml))


def encode(pipeline, config_xml=None, config=None):
    """Encode a pipeline model as a Jenkins ``config.xml`` document.

    :arg pipeline: a :class:`SinglePipeline` or :class:`MultiBranchPipeline`
    :arg str config_xml: the current document of the job; when given it is
        updated instead of rendering a new one
    :arg CodecConfig config: codec options (optional)
    """
    if isinstance(pipeline, SinglePipeline):
        if config_xml is None:
            return create_pipeline_config_xml(pipeline, config)
        return update_pipeline_config_xml(config_xml, pipeline, config)
    if isinstance(pipeline, MultiBranchPipeline):
        if config_xml is None:
            return create_multibranch_pipeline_config_xml(pipeline, config)
        return update_multibranch_pipeline_config_xml(config_xml, pipeline,
                                                      config)
    raise errors.JenkinsPipelinesException(
        "Unsupported pipeline model: {0}".format(type(pipeline).__name__))


def decode(config_xml, config=None):
    """Decode a Jenkins ``config.xml`` document into the pipeline model
    matching its root element.
    """
    config = config or CodecConfig()
    root = parse_config_xml(config_xml)
    for module in [Pipeline(config), WorkflowMultiBranch(config)]:
        if root.tag == module.jenkins_class:
            logger.debug("Decoding {0} document".format(root.tag))
            return module.parse_xml(root)
    raise errors.MissingElementError(
        "Unsupported Jenkins project class: {0}".format(root.tag))

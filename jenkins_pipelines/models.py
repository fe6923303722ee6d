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

"""
Value objects describing pipelines independently of the Jenkins XML format.

Every model is an immutable named tuple; fields holding lists are stored as
tuples so that two models built from equal data compare equal.
"""

import collections

from jenkins_pipelines.errors import JenkinsPipelinesException

__all__ = [
    "SOURCE_TYPES",
    "BitbucketServerSource",
    "Discarder",
    "DiscoverPRFromForks",
    "GenericVariable",
    "GenericWebhook",
    "GitCloneOption",
    "GitSource",
    "GithubSource",
    "GitlabSource",
    "MultiBranchJobTrigger",
    "MultiBranchPipeline",
    "ParameterDefinition",
    "RemoteTrigger",
    "SinglePipeline",
    "SingleSvnSource",
    "SvnSource",
    "TimerTrigger",
    "from_dict",
    "to_dict",
]

SOURCE_TYPE_GIT = 'git'
SOURCE_TYPE_GITHUB = 'github'
SOURCE_TYPE_GITLAB = 'gitlab'
SOURCE_TYPE_BITBUCKET = 'bitbucket_server'
SOURCE_TYPE_SVN = 'svn'
SOURCE_TYPE_SINGLE_SVN = 'single_svn'

SOURCE_TYPES = (
    SOURCE_TYPE_GIT,
    SOURCE_TYPE_GITHUB,
    SOURCE_TYPE_GITLAB,
    SOURCE_TYPE_BITBUCKET,
    SOURCE_TYPE_SVN,
    SOURCE_TYPE_SINGLE_SVN,
)


Discarder = collections.namedtuple(
    'Discarder', ['days_to_keep', 'num_to_keep'], defaults=('', ''))

ParameterDefinition = collections.namedtuple(
    'ParameterDefinition',
    ['name', 'default_value', 'type', 'description'],
    defaults=('', '', '', ''))

TimerTrigger = collections.namedtuple(
    'TimerTrigger', ['cron', 'interval'], defaults=('', ''))

RemoteTrigger = collections.namedtuple(
    'RemoteTrigger', ['token'], defaults=('',))

GenericVariable = collections.namedtuple(
    'GenericVariable', ['key', 'regexp_filter'], defaults=('', ''))

MultiBranchJobTrigger = collections.namedtuple(
    'MultiBranchJobTrigger',
    ['create_action_jobs_to_trigger', 'delete_action_jobs_to_trigger'],
    defaults=('', ''))

GitCloneOption = collections.namedtuple(
    'GitCloneOption', ['shallow', 'timeout', 'depth'],
    defaults=(False, 10, 1))

DiscoverPRFromForks = collections.namedtuple(
    'DiscoverPRFromForks', ['strategy', 'trust'], defaults=(0, 0))


class GenericWebhook(collections.namedtuple('GenericWebhook', [
        'token', 'cause', 'print_variables', 'print_post_content',
        'filter_text', 'filter_expression', 'request_variables',
        'header_variables'],
        defaults=('', '', False, False, '', '', (), ()))):
    """Generic Webhook Trigger settings; a webhook that exists is enabled."""

    __slots__ = ()

    def __new__(cls, *args, **kwargs):
        self = super(GenericWebhook, cls).__new__(cls, *args, **kwargs)
        return self._replace(
            request_variables=tuple(self.request_variables or ()),
            header_variables=tuple(self.header_variables or ()))


GitSource = collections.namedtuple('GitSource', [
    'scm_id', 'url', 'credential_id', 'discover_branches', 'discover_tags',
    'clone_option', 'regex_filter'],
    defaults=('', '', '', False, False, None, ''))

GithubSource = collections.namedtuple('GithubSource', [
    'scm_id', 'owner', 'repo', 'credential_id', 'api_uri',
    'discover_branches', 'discover_pr_from_origin', 'discover_pr_from_forks',
    'discover_tags', 'clone_option', 'regex_filter',
    'accept_jenkins_notification'],
    defaults=('', '', '', '', '', 0, 0, None, False, None, '', False))

GitlabSource = collections.namedtuple('GitlabSource', [
    'scm_id', 'server_name', 'owner', 'repo', 'credential_id',
    'discover_branches', 'discover_pr_from_origin', 'discover_pr_from_forks',
    'discover_tags', 'clone_option', 'regex_filter',
    'accept_jenkins_notification'],
    defaults=('', '', '', '', '', 0, 0, None, False, None, '', False))

BitbucketServerSource = collections.namedtuple('BitbucketServerSource', [
    'scm_id', 'owner', 'repo', 'credential_id', 'api_uri',
    'discover_branches', 'discover_pr_from_origin', 'discover_pr_from_forks',
    'discover_tags', 'clone_option', 'regex_filter',
    'accept_jenkins_notification'],
    defaults=('', '', '', '', '', 0, 0, None, False, None, '', False))

SvnSource = collections.namedtuple('SvnSource', [
    'scm_id', 'remote', 'credential_id', 'includes', 'excludes'],
    defaults=('', '', '', '', ''))

SingleSvnSource = collections.namedtuple('SingleSvnSource', [
    'scm_id', 'remote', 'credential_id'],
    defaults=('', '', ''))


class SinglePipeline(collections.namedtuple('SinglePipeline', [
        'description', 'jenkinsfile', 'disable_concurrent', 'discarder',
        'parameters', 'timer_trigger', 'generic_webhook', 'remote_trigger'],
        defaults=('', '', False, None, (), None, None, None))):
    """A pipeline whose Jenkinsfile is stored inline in the job."""

    __slots__ = ()

    def __new__(cls, *args, **kwargs):
        self = super(SinglePipeline, cls).__new__(cls, *args, **kwargs)
        return self._replace(parameters=tuple(self.parameters or ()))


MultiBranchPipeline = collections.namedtuple('MultiBranchPipeline', [
    'description', 'script_path', 'source_type', 'git_source',
    'github_source', 'gitlab_source', 'bitbucket_server_source',
    'svn_source', 'single_svn_source', 'discarder', 'timer_trigger',
    'multibranch_job_trigger'],
    defaults=('', '', '', None, None, None, None, None, None, None, None,
              None))
MultiBranchPipeline.__doc__ = (
    "A pipeline discovering branches and pull requests from one SCM source.")

# source discriminator -> model field holding the source
SOURCE_FIELDS = collections.OrderedDict([
    (SOURCE_TYPE_GIT, 'git_source'),
    (SOURCE_TYPE_GITHUB, 'github_source'),
    (SOURCE_TYPE_GITLAB, 'gitlab_source'),
    (SOURCE_TYPE_BITBUCKET, 'bitbucket_server_source'),
    (SOURCE_TYPE_SVN, 'svn_source'),
    (SOURCE_TYPE_SINGLE_SVN, 'single_svn_source'),
])

# nested model types, a one-item list marks a sequence of that type
_NESTED = {
    GenericWebhook: {
        'request_variables': [GenericVariable],
        'header_variables': [GenericVariable],
    },
    GitSource: {'clone_option': GitCloneOption},
    GithubSource: {
        'clone_option': GitCloneOption,
        'discover_pr_from_forks': DiscoverPRFromForks,
    },
    GitlabSource: {
        'clone_option': GitCloneOption,
        'discover_pr_from_forks': DiscoverPRFromForks,
    },
    BitbucketServerSource: {
        'clone_option': GitCloneOption,
        'discover_pr_from_forks': DiscoverPRFromForks,
    },
    SinglePipeline: {
        'discarder': Discarder,
        'parameters': [ParameterDefinition],
        'timer_trigger': TimerTrigger,
        'generic_webhook': GenericWebhook,
        'remote_trigger': RemoteTrigger,
    },
    MultiBranchPipeline: {
        'git_source': GitSource,
        'github_source': GithubSource,
        'gitlab_source': GitlabSource,
        'bitbucket_server_source': BitbucketServerSource,
        'svn_source': SvnSource,
        'single_svn_source': SingleSvnSource,
        'discarder': Discarder,
        'timer_trigger': TimerTrigger,
        'multibranch_job_trigger': MultiBranchJobTrigger,
    },
}


def to_dict(value):
    """Convert a model, and every model nested in it, to plain dicts and
    lists."""
    if hasattr(value, '_asdict'):
        return dict((key, to_dict(item))
                    for key, item in value._asdict().items())
    if isinstance(value, (list, tuple)):
        return [to_dict(item) for item in value]
    return value


def from_dict(cls, data):
    """Build a model of type ``cls`` from plain data as produced by
    :func:`to_dict` (or loaded from YAML/JSON). Missing keys take the model
    defaults.

    :arg type cls: the model class to build
    :arg dict data: the field values, ``None`` gives ``None``
    """
    if data is None:
        return None
    if isinstance(data, cls):
        return data

    nested = _NESTED.get(cls, {})
    kwargs = {}
    for key, value in data.items():
        if key not in cls._fields:
            raise JenkinsPipelinesException(
                "Unknown field '{0}' for {1}, expected one of: {2}".format(
                    key, cls.__name__, ', '.join(cls._fields)))
        kind = nested.get(key)
        if isinstance(kind, list):
            value = [from_dict(kind[0], item) for item in value or ()]
        elif kind is not None:
            value = from_dict(kind, value)
        kwargs[key] = value
    return cls(**kwargs)

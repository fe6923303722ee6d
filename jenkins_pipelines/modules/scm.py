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
The SCM module encodes the branch source of a multibranch pipeline, the
``source`` element under ``sources/data/jenkins.branch.BranchSource``.

Every provider exposes an ``append_<provider>_source(source, model)``
function filling an existing ``source`` element, and a
``get_<provider>_source(source)`` function reading it back. Discovery
traits are only written for non-zero values, and read back one by one.

Plugins required, depending on the source type:
    * git: :jenkins-plugins:`Git Plugin <git>`
    * github: :jenkins-plugins:`GitHub Branch Source <github-branch-source>`
    * gitlab: :jenkins-plugins:`GitLab Branch Source <gitlab-branch-source>`
    * bitbucket_server: :jenkins-plugins:`Bitbucket Branch Source
      <cloudbees-bitbucket-branch-source>`
    * svn, single_svn: :jenkins-plugins:`Subversion <subversion>`
"""

import collections
import logging
import xml.etree.ElementTree as XML

import jenkins_pipelines.modules.helpers as helpers
from jenkins_pipelines.models import BitbucketServerSource
from jenkins_pipelines.models import DiscoverPRFromForks
from jenkins_pipelines.models import GitSource
from jenkins_pipelines.models import GithubSource
from jenkins_pipelines.models import GitlabSource
from jenkins_pipelines.models import SingleSvnSource
from jenkins_pipelines.models import SvnSource
from jenkins_pipelines.models import SOURCE_TYPE_BITBUCKET
from jenkins_pipelines.models import SOURCE_TYPE_GIT
from jenkins_pipelines.models import SOURCE_TYPE_GITHUB
from jenkins_pipelines.models import SOURCE_TYPE_GITLAB
from jenkins_pipelines.models import SOURCE_TYPE_SINGLE_SVN
from jenkins_pipelines.models import SOURCE_TYPE_SVN
from jenkins_pipelines.modules.trust import BITBUCKET_PR_DISCOVER_TRUST
from jenkins_pipelines.modules.trust import GITHUB_PR_DISCOVER_TRUST
from jenkins_pipelines.modules.trust import PR_DISCOVER_TRUST

logger = logging.getLogger(__name__)

GIT_SOURCE_CLASS = 'jenkins.plugins.git.GitSCMSource'
GITHUB_SOURCE_CLASS = ('org.jenkinsci.plugins.github_branch_source.'
                       'GitHubSCMSource')
GITLAB_SOURCE_CLASS = 'io.jenkins.plugins.gitlabbranchsource.GitLabSCMSource'
BITBUCKET_SOURCE_CLASS = ('com.cloudbees.jenkins.plugins.bitbucket.'
                          'BitbucketSCMSource')
SVN_SOURCE_CLASS = 'jenkins.scm.impl.subversion.SubversionSCMSource'
SINGLE_SVN_SOURCE_CLASS = 'jenkins.scm.impl.SingleSCMSource'

SVN_MODULE_LOCATION = 'hudson.scm.SubversionSCM_-ModuleLocation'

git_traits_path = 'jenkins.plugins.git.traits'
# element names escape the underscore of the plugin package
github_traits_path = 'org.jenkinsci.plugins.github__branch__source'
gitlab_traits_path = 'io.jenkins.plugins.gitlabbranchsource'
bitbucket_traits_path = 'com.cloudbees.jenkins.plugins.bitbucket'

GITHUB_TRAITS = {
    'branch': github_traits_path + '.BranchDiscoveryTrait',
    'origin': github_traits_path + '.OriginPullRequestDiscoveryTrait',
    'fork': github_traits_path + '.ForkPullRequestDiscoveryTrait',
    'tag': github_traits_path + '.TagDiscoveryTrait',
    'trust': ('org.jenkinsci.plugins.github_branch_source.'
              'ForkPullRequestDiscoveryTrait$'),
    'skip-notifications': ('org.jenkinsci.plugins.github.notifications.'
                           'NotificationsSkipTrait'),
}

GITLAB_TRAITS = {
    'branch': gitlab_traits_path + '.BranchDiscoveryTrait',
    'origin': gitlab_traits_path + '.OriginMergeRequestDiscoveryTrait',
    'fork': gitlab_traits_path + '.ForkMergeRequestDiscoveryTrait',
    'tag': gitlab_traits_path + '.TagDiscoveryTrait',
    'trust': gitlab_traits_path + '.ForkMergeRequestDiscoveryTrait$',
    'skip-notifications': (gitlab_traits_path +
                           '.GitLabSkipNotificationsTrait'),
}

BITBUCKET_TRAITS = {
    'branch': bitbucket_traits_path + '.BranchDiscoveryTrait',
    'origin': bitbucket_traits_path + '.OriginPullRequestDiscoveryTrait',
    'fork': bitbucket_traits_path + '.ForkPullRequestDiscoveryTrait',
    'tag': bitbucket_traits_path + '.TagDiscoveryTrait',
    'trust': bitbucket_traits_path + '.ForkPullRequestDiscoveryTrait$',
    'skip-notifications': (bitbucket_traits_path +
                           '.notifications.SkipNotificationsTrait'),
}


def append_discovery_traits(traits, source, names, trust_table):
    """Append the branch, pull request and tag discovery traits shared by
    the hosted git providers, followed by the clone option, the head filter
    and the skip notifications traits.
    """
    for field, trait in [('discover_branches', 'branch'),
                         ('discover_pr_from_origin', 'origin')]:
        strategy = getattr(source, field)
        if strategy:
            XML.SubElement(XML.SubElement(traits, names[trait]),
                           'strategyId').text = str(strategy)

    forks = source.discover_pr_from_forks
    if forks is not None:
        fork_trait = XML.SubElement(traits, names['fork'])
        XML.SubElement(fork_trait, 'strategyId').text = str(forks.strategy)
        if trust_table.is_valid(forks.trust):
            XML.SubElement(fork_trait, 'trust', {
                'class': names['trust'] + trust_table.to_string(forks.trust),
            })
        elif forks.trust:
            logger.warning("Invalid discover PR trust value: {0}, no trust "
                           "written".format(forks.trust))

    if source.discover_tags:
        XML.SubElement(traits, names['tag'])

    helpers.append_clone_option_trait(traits, source.clone_option)
    helpers.append_regex_filter_trait(traits, source.regex_filter)

    if not source.accept_jenkins_notification:
        XML.SubElement(traits, names['skip-notifications'], {
            'plugin': 'skip-notifications-trait',
        })


def get_discovery_traits(traits, names, trust_table):
    """Read back the traits written by :func:`append_discovery_traits` into
    a dict of source model fields.
    """
    data = {
        'discover_branches': helpers.parse_int(helpers.child_text(
            helpers.select_child(traits, names['branch']), 'strategyId')),
        'discover_pr_from_origin': helpers.parse_int(helpers.child_text(
            helpers.select_child(traits, names['origin']), 'strategyId')),
        'discover_tags': helpers.select_child(
            traits, names['tag']) is not None,
        'clone_option': helpers.get_clone_option_from_traits(traits),
        'regex_filter': helpers.get_regex_filter_from_traits(traits),
        'accept_jenkins_notification': helpers.select_child(
            traits, names['skip-notifications']) is None,
    }

    fork_trait = helpers.select_child(traits, names['fork'])
    if fork_trait is not None:
        trust = 0
        trust_element = helpers.select_child(fork_trait, 'trust')
        if trust_element is not None:
            trust_name = trust_element.get('class', '').split('$')[-1]
            value, valid = trust_table.from_string(trust_name)
            if valid:
                trust = value
            else:
                logger.warning("Invalid discover PR trust value: "
                               "{0}".format(trust_name))
        data['discover_pr_from_forks'] = DiscoverPRFromForks(
            strategy=helpers.parse_int(
                helpers.child_text(fork_trait, 'strategyId')),
            trust=trust)
    return data


def append_git_source(source, git_source):
    """Configure a plain git repository source.

    :arg Element source: the ``source`` element to fill
    :arg GitSource git_source: the repository url, credentials, branch and
        tag discovery flags, clone option and head filter regex
    """
    if source is None or git_source is None:
        logger.warning("Please provide a git source when the source type "
                       "is git")
        return
    helpers.set_attribute(source, 'class', GIT_SOURCE_CLASS)
    helpers.set_attribute(source, 'plugin', 'git')

    source_mapping = [
        ('scm_id', 'id', ''),
        ('url', 'remote', ''),
        ('credential_id', 'credentialsId', ''),
    ]
    helpers.convert_mapping_to_xml(source, git_source, source_mapping)

    traits = XML.SubElement(source, 'traits')
    if git_source.discover_branches:
        XML.SubElement(traits, git_traits_path + '.BranchDiscoveryTrait')
    if git_source.discover_tags:
        XML.SubElement(traits, git_traits_path + '.TagDiscoveryTrait')
    helpers.append_clone_option_trait(traits, git_source.clone_option)
    helpers.append_regex_filter_trait(traits, git_source.regex_filter)


def get_git_source(source):
    if source is None:
        logger.warning("No source element to read a git source from")
        return GitSource()

    source_mapping = [
        ('scm_id', 'id', ''),
        ('url', 'remote', ''),
        ('credential_id', 'credentialsId', ''),
    ]
    data = helpers.convert_xml_to_mapping(source, source_mapping)

    traits = helpers.select_child(source, 'traits')
    data['discover_branches'] = helpers.select_child(
        traits, git_traits_path + '.BranchDiscoveryTrait') is not None
    data['discover_tags'] = helpers.select_child(
        traits, git_traits_path + '.TagDiscoveryTrait') is not None
    data['clone_option'] = helpers.get_clone_option_from_traits(traits)
    data['regex_filter'] = helpers.get_regex_filter_from_traits(traits)
    return GitSource(**data)


def append_github_source(source, github_source):
    """Configure a GitHub repository source.

    ``api_uri`` is only needed for GitHub Enterprise servers. The fork pull
    request trust is one of
    :data:`~jenkins_pipelines.modules.trust.GITHUB_PR_DISCOVER_TRUST`.
    """
    if source is None or github_source is None:
        logger.warning("Please provide a GitHub source when the source type "
                       "is github")
        return
    helpers.set_attribute(source, 'class', GITHUB_SOURCE_CLASS)
    helpers.set_attribute(source, 'plugin', 'github-branch-source')

    source_mapping = [
        ('scm_id', 'id', ''),
        ('credential_id', 'credentialsId', ''),
        ('owner', 'repoOwner', ''),
        ('repo', 'repository', ''),
    ]
    helpers.convert_mapping_to_xml(source, github_source, source_mapping)
    if github_source.api_uri:
        XML.SubElement(source, 'apiUri').text = github_source.api_uri

    traits = XML.SubElement(source, 'traits')
    append_discovery_traits(traits, github_source, GITHUB_TRAITS,
                            GITHUB_PR_DISCOVER_TRUST)


def get_github_source(source):
    if source is None:
        logger.warning("No source element to read a GitHub source from")
        return GithubSource()

    source_mapping = [
        ('scm_id', 'id', ''),
        ('credential_id', 'credentialsId', ''),
        ('owner', 'repoOwner', ''),
        ('repo', 'repository', ''),
        ('api_uri', 'apiUri', ''),
    ]
    data = helpers.convert_xml_to_mapping(source, source_mapping)
    data.update(get_discovery_traits(helpers.select_child(source, 'traits'),
                                     GITHUB_TRAITS,
                                     GITHUB_PR_DISCOVER_TRUST))
    return GithubSource(**data)


def gitlab_project_path(owner, repo):
    if owner and repo:
        return '/'.join([owner, repo])
    return repo


def append_gitlab_source(source, gitlab_source):
    """Configure a GitLab project source.

    ``server_name`` refers to a GitLab server configured in Jenkins, the
    project path is written as ``owner/repo``. Merge requests from forks
    use the :data:`~jenkins_pipelines.modules.trust.PR_DISCOVER_TRUST`
    levels.
    """
    if source is None or gitlab_source is None:
        logger.warning("Please provide a GitLab source when the source type "
                       "is gitlab")
        return
    helpers.set_attribute(source, 'class', GITLAB_SOURCE_CLASS)
    helpers.set_attribute(source, 'plugin', 'gitlab-branch-source')

    source_mapping = [
        ('scm_id', 'id', ''),
        ('server_name', 'serverName', ''),
        ('credential_id', 'credentialsId', ''),
        ('owner', 'projectOwner', ''),
    ]
    helpers.convert_mapping_to_xml(source, gitlab_source, source_mapping)
    XML.SubElement(source, 'projectPath').text = gitlab_project_path(
        gitlab_source.owner, gitlab_source.repo)

    traits = XML.SubElement(source, 'traits')
    append_discovery_traits(traits, gitlab_source, GITLAB_TRAITS,
                            PR_DISCOVER_TRUST)


def get_gitlab_source(source):
    if source is None:
        logger.warning("No source element to read a GitLab source from")
        return GitlabSource()

    source_mapping = [
        ('scm_id', 'id', ''),
        ('server_name', 'serverName', ''),
        ('credential_id', 'credentialsId', ''),
        ('owner', 'projectOwner', ''),
        ('repo', 'projectPath', ''),
    ]
    data = helpers.convert_xml_to_mapping(source, source_mapping)
    owner_prefix = data['owner'] + '/'
    if data['owner'] and data['repo'].lower().startswith(owner_prefix.lower()):
        data['repo'] = data['repo'][len(owner_prefix):]

    data.update(get_discovery_traits(helpers.select_child(source, 'traits'),
                                     GITLAB_TRAITS, PR_DISCOVER_TRUST))
    return GitlabSource(**data)


def append_bitbucket_server_source(source, bitbucket_source):
    """Configure a Bitbucket Server (or Bitbucket Cloud) repository source.

    ``api_uri`` is written as the ``serverUrl``. Fork pull request trust
    uses :data:`~jenkins_pipelines.modules.trust.BITBUCKET_PR_DISCOVER_TRUST`.
    """
    if source is None or bitbucket_source is None:
        logger.warning("Please provide a Bitbucket Server source when the "
                       "source type is bitbucket_server")
        return
    helpers.set_attribute(source, 'class', BITBUCKET_SOURCE_CLASS)
    helpers.set_attribute(source, 'plugin',
                          'cloudbees-bitbucket-branch-source')

    source_mapping = [
        ('scm_id', 'id', ''),
        ('credential_id', 'credentialsId', ''),
        ('owner', 'repoOwner', ''),
        ('repo', 'repository', ''),
        ('api_uri', 'serverUrl', ''),
    ]
    helpers.convert_mapping_to_xml(source, bitbucket_source, source_mapping)

    traits = XML.SubElement(source, 'traits')
    append_discovery_traits(traits, bitbucket_source, BITBUCKET_TRAITS,
                            BITBUCKET_PR_DISCOVER_TRUST)


def get_bitbucket_server_source(source):
    if source is None:
        logger.warning("No source element to read a Bitbucket Server source "
                       "from")
        return BitbucketServerSource()

    source_mapping = [
        ('scm_id', 'id', ''),
        ('credential_id', 'credentialsId', ''),
        ('owner', 'repoOwner', ''),
        ('repo', 'repository', ''),
        ('api_uri', 'serverUrl', ''),
    ]
    data = helpers.convert_xml_to_mapping(source, source_mapping)
    data.update(get_discovery_traits(helpers.select_child(source, 'traits'),
                                     BITBUCKET_TRAITS,
                                     BITBUCKET_PR_DISCOVER_TRUST))
    return BitbucketServerSource(**data)


def append_svn_source(source, svn_source):
    """Configure a Subversion source discovering branches below
    ``remote``, filtered by the ``includes`` and ``excludes`` wildcards.
    """
    if source is None or svn_source is None:
        logger.warning("Please provide a SVN source when the source type "
                       "is svn")
        return
    helpers.set_attribute(source, 'class', SVN_SOURCE_CLASS)
    helpers.set_attribute(source, 'plugin', 'subversion')

    source_mapping = [
        ('scm_id', 'id', ''),
        ('credential_id', 'credentialsId', ''),
        ('remote', 'remoteBase', ''),
        ('includes', 'includes', ''),
        ('excludes', 'excludes', ''),
    ]
    helpers.convert_mapping_to_xml(source, svn_source, source_mapping)


def get_svn_source(source):
    if source is None:
        logger.warning("No source element to read a SVN source from")
        return SvnSource()

    source_mapping = [
        ('scm_id', 'id', ''),
        ('credential_id', 'credentialsId', ''),
        ('remote', 'remoteBase', ''),
        ('includes', 'includes', ''),
        ('excludes', 'excludes', ''),
    ]
    return SvnSource(**helpers.convert_xml_to_mapping(source, source_mapping))


def append_single_svn_source(source, svn_source):
    """Configure a single Subversion location built as the ``master``
    branch.
    """
    if source is None or svn_source is None:
        logger.warning("Please provide a single SVN source when the source "
                       "type is single_svn")
        return
    helpers.set_attribute(source, 'class', SINGLE_SVN_SOURCE_CLASS)
    helpers.set_attribute(source, 'plugin', 'scm-api')
    XML.SubElement(source, 'id').text = svn_source.scm_id
    XML.SubElement(source, 'name').text = 'master'

    scm = XML.SubElement(source, 'scm', {
        'class': 'hudson.scm.SubversionSCM',
        'plugin': 'subversion',
    })
    locations = XML.SubElement(scm, 'locations')
    location = XML.SubElement(locations, SVN_MODULE_LOCATION)
    location_mapping = [
        ('remote', 'remote', ''),
        ('credential_id', 'credentialsId', ''),
        ('', 'local', '.'),
        ('', 'depthOption', 'infinity'),
        ('', 'ignoreExternalsOption', True),
        ('', 'cancelProcessOnExternalsFail', True),
    ]
    helpers.convert_mapping_to_xml(location, svn_source, location_mapping)
    XML.SubElement(scm, 'excludedRegions')
    XML.SubElement(scm, 'includedRegions')
    XML.SubElement(scm, 'excludedUsers')
    XML.SubElement(scm, 'excludedRevprop')
    XML.SubElement(scm, 'excludedCommitMessages')
    XML.SubElement(scm, 'workspaceUpdater', {
        'class': 'hudson.scm.subversion.UpdateUpdater',
    })
    XML.SubElement(scm, 'ignoreDirPropChanges').text = 'false'
    XML.SubElement(scm, 'filterChangelog').text = 'false'
    XML.SubElement(scm, 'quietOperation').text = 'true'


def get_single_svn_source(source):
    if source is None:
        logger.warning("No source element to read a single SVN source from")
        return SingleSvnSource()

    scm = helpers.select_child(source, 'scm')
    location = helpers.select_child(helpers.select_child(scm, 'locations'),
                                    SVN_MODULE_LOCATION)
    location_mapping = [
        ('remote', 'remote', ''),
        ('credential_id', 'credentialsId', ''),
    ]
    data = helpers.convert_xml_to_mapping(location, location_mapping)
    data['scm_id'] = helpers.child_text(source, 'id')
    return SingleSvnSource(**data)


SourceCodec = collections.namedtuple(
    'SourceCodec', ['source_class', 'field', 'append', 'get'])

SOURCE_CODECS = collections.OrderedDict([
    (SOURCE_TYPE_GIT, SourceCodec(
        GIT_SOURCE_CLASS, 'git_source',
        append_git_source, get_git_source)),
    (SOURCE_TYPE_GITHUB, SourceCodec(
        GITHUB_SOURCE_CLASS, 'github_source',
        append_github_source, get_github_source)),
    (SOURCE_TYPE_GITLAB, SourceCodec(
        GITLAB_SOURCE_CLASS, 'gitlab_source',
        append_gitlab_source, get_gitlab_source)),
    (SOURCE_TYPE_BITBUCKET, SourceCodec(
        BITBUCKET_SOURCE_CLASS, 'bitbucket_server_source',
        append_bitbucket_server_source, get_bitbucket_server_source)),
    (SOURCE_TYPE_SVN, SourceCodec(
        SVN_SOURCE_CLASS, 'svn_source',
        append_svn_source, get_svn_source)),
    (SOURCE_TYPE_SINGLE_SVN, SourceCodec(
        SINGLE_SVN_SOURCE_CLASS, 'single_svn_source',
        append_single_svn_source, get_single_svn_source)),
])

SOURCE_CLASSES = dict(
    (codec.source_class, source_type)
    for source_type, codec in SOURCE_CODECS.items())


def encode_source(source, source_type, value):
    """Fill ``source`` with ``value`` using the codec of ``source_type``."""
    codec = SOURCE_CODECS[source_type]
    logger.debug("Encoding {0} source".format(source_type))
    codec.append(source, value)
    return source


def decode_source(source, source_type):
    codec = SOURCE_CODECS[source_type]
    logger.debug("Decoding {0} source".format(source_type))
    return codec.get(source)

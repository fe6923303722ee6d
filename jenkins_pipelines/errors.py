"""Exception classes for jenkins_pipelines errors"""

import inspect

SOURCE_DISPATCHERS = ('encode_source', 'decode_source')


def is_sequence(arg):
    return (not hasattr(arg, "strip") and
            (hasattr(arg, "__getitem__") or
             hasattr(arg, "__iter__")))


class JenkinsPipelinesException(Exception):
    pass


class ModuleError(JenkinsPipelinesException):

    def get_module_name(self):
        frame = inspect.currentframe()
        module_name = '<unresolved>'
        while frame:
            data = frame.f_locals
            # source encoding/decoding dispatched by discriminator
            if (frame.f_code.co_name in SOURCE_DISPATCHERS and
                    'source_type' in data):
                module_name = "source.%s" % data['source_type']
                break
            # document encoding done by a project class
            if 'pipeline' in data and data['pipeline'] is not None:
                module_name = type(data['pipeline']).__name__
                break
            frame = frame.f_back

        return module_name


class InvalidAttributeError(ModuleError):

    def __init__(self, attribute_name, value, valid_values=None):
        self.attribute_name = attribute_name
        self.value = value
        message = "Invalid value '{0}' for field '{1}' of {2}".format(
            value, attribute_name, self.get_module_name())

        if is_sequence(valid_values):
            message += "\nExpected one of: {0}".format(
                ', '.join("'{0}'".format(value)
                          for value in valid_values))

        super(InvalidAttributeError, self).__init__(message)


class MissingAttributeError(ModuleError):

    def __init__(self, missing_attribute, module_name=None):
        self.missing_attribute = missing_attribute
        module = module_name or self.get_module_name()
        if is_sequence(missing_attribute):
            message = "{0} needs one of the fields {1}".format(
                module, ', '.join("'{0}'".format(value)
                                  for value in missing_attribute))
        else:
            message = "{0} has no value for required field '{1}'".format(
                module, missing_attribute)

        super(MissingAttributeError, self).__init__(message)


class AttributeConflictError(ModuleError):

    def __init__(self, attribute_name, attributes_in_conflict,
                 module_name=None):
        self.attribute_name = attribute_name
        self.attributes_in_conflict = list(attributes_in_conflict)
        module = module_name or self.get_module_name()
        message = "Field '{0}' of {1} conflicts with {2}".format(
            attribute_name, module,
            ', '.join("'{0}'".format(value)
                      for value in self.attributes_in_conflict))

        super(AttributeConflictError, self).__init__(message)


class UnsupportedSourceTypeError(ModuleError):

    def __init__(self, source_type, valid_values=None):
        message = "unsupported source type: '{0}' in {1}".format(
            source_type, self.get_module_name())

        if is_sequence(valid_values):
            message += "\nExpected one of: {0}".format(
                ', '.join("'{0}'".format(value)
                          for value in valid_values))

        super(UnsupportedSourceTypeError, self).__init__(message)


class UnknownSourceClassError(JenkinsPipelinesException):

    def __init__(self, class_name):
        message = ("can not parse multibranch pipeline source: unknown "
                   "source class '{0}'".format(class_name))
        self.class_name = class_name

        super(UnknownSourceClassError, self).__init__(message)


class MissingElementError(JenkinsPipelinesException):
    pass


class XmlFormatError(JenkinsPipelinesException):
    pass


class PipelineCodecConfigException(JenkinsPipelinesException):
    pass

from jenkins_pipelines.codec import (  # noqa
    create_multibranch_pipeline_config_xml,
    create_pipeline_config_xml,
    decode,
    encode,
    parse_multibranch_pipeline_config_xml,
    parse_pipeline_config_xml,
    update_multibranch_pipeline_config_xml,
    update_pipeline_config_xml,
)

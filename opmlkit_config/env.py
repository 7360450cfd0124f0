import os.path

from dotenv import load_dotenv
from validr import T, fields, modelclass

from opmlkit_common.validator import compiler


@modelclass(compiler=compiler)
class ConfigModel:
    pass


class EnvConfig(ConfigModel):
    debug: bool = T.bool.default(False).desc('debug')
    log_level: str = T.enum('DEBUG,INFO,WARNING,ERROR').default('WARNING')
    enable_loguru: bool = T.bool.default(True).desc('route logging into loguru')
    max_depth: int = T.int.min(1).optional.desc('max outline nesting depth when parsing')
    pretty: bool = T.bool.default(True).desc('indent xml written by the format command')

    def __post_init__(self):
        if self.debug:
            self.log_level = 'DEBUG'


def load_env_config() -> EnvConfig:
    envfile_path = os.getenv('OPML_CONFIG')
    if envfile_path:
        envfile_path = os.path.abspath(os.path.expanduser(envfile_path))
        load_dotenv(envfile_path)
    configs = {}
    for name in fields(EnvConfig):
        key = ('OPML_' + name).upper()
        configs[name] = os.environ.get(key, None)
    return EnvConfig(configs)

from bunko.config.base import (
    BaseConfig,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
)


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}

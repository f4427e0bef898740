# RockWatch — Database Models
# Import all models here for SQLAlchemy discovery

from rockwatch.models.mine import Mine                    # noqa
from rockwatch.models.sensor_data import SensorData       # noqa
from rockwatch.models.alert import Alert                  # noqa
from rockwatch.models.delivery_log import DeliveryLog     # noqa

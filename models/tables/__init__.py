# Import all table models here
from models.tables.channel import DeliveryChannel
from models.tables.ping_role import PingRole
from models.tables.question import CustomQuestion, Question
from models.tables.poll import CustomPoll, Poll
